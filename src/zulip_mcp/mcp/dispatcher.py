import json
import logging

from zulip_mcp.errors import UnknownToolError
from zulip_mcp.errors import ValidationError
from zulip_mcp.errors import message_for_error
from zulip_mcp.mcp.catalog import TOOL_CATALOG


def text_response(payload):
    return {
        'content': [
            {
                'type': 'text',
                'text': json.dumps(payload, ensure_ascii=False),
            },
        ],
    }


def error_response(message):
    return text_response({'error': message})


class ToolDispatcher:
    """Routes tool calls to a :class:`ZulipWorkspace` and wraps every outcome,
    successful or not, in a single-text-item response envelope.
    """

    def __init__(self, workspace, catalog=TOOL_CATALOG):
        self.workspace = workspace
        self.catalog = tuple(catalog)
        self.descriptors_by_name = {
            descriptor.name: descriptor for descriptor in self.catalog
        }

    def list_tools(self):
        return list(self.catalog)

    def descriptor_for(self, tool_name):
        try:
            return self.descriptors_by_name[tool_name]
        except KeyError:
            raise UnknownToolError(tool_name) from None

    async def dispatch(self, tool_name, arguments):
        logging.getLogger(__name__).debug('Received call to %s', tool_name)
        try:
            result = await self.perform(tool_name, arguments)
            return text_response(result)
        except Exception as error:
            message = message_for_error(error)
            logging.getLogger(__name__).warning(
                'Error executing tool %s: %s',
                tool_name,
                message,
            )
            return error_response(message)

    async def perform(self, tool_name, arguments):
        if arguments is None:
            raise ValidationError('No arguments provided')
        descriptor = self.descriptor_for(tool_name)
        return await descriptor.perform(self.workspace, arguments)
