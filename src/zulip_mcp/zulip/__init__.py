from zulip_mcp.zulip.session import RemoteCredentials
from zulip_mcp.zulip.session import ZulipConnection
from zulip_mcp.zulip.session import credentials_from_environment
from zulip_mcp.zulip.workspace import ZulipWorkspace
from zulip_mcp.zulip.workspace import connected_workspace

__all__ = [
    'RemoteCredentials',
    'ZulipConnection',
    'ZulipWorkspace',
    'connected_workspace',
    'credentials_from_environment',
]
