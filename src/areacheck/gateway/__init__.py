"""Gateways: the transport side of the request loop.

  - QueueGateway: in-process queue, responses delivered via Futures
  - StdioGateway: one request from a CGI environment
  - TcpGateway: length-prefixed framing over TCP, one request per connection
"""
from areacheck.gateway.base import Gateway, GatewayRequest
from areacheck.gateway.memory import QueueGateway
from areacheck.gateway.stdio import StdioGateway
from areacheck.gateway.tcp import TcpGateway, send_request

__all__ = [
    "Gateway",
    "GatewayRequest",
    "QueueGateway",
    "StdioGateway",
    "TcpGateway",
    "send_request",
]
