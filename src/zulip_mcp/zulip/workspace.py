import contextlib
import json

from zulip_mcp.errors import NotFoundError
from zulip_mcp.errors import RemoteCallError
from zulip_mcp.zulip.session import ZulipConnection


@contextlib.contextmanager
def remote_operation(description):
    try:
        yield
    except RemoteCallError as error:
        raise RemoteCallError(
            'Error %s: %s' % (description, error.message),
            cause=error,
        ) from error


def half_of_limit(limit):
    # Both sides of the anchor get limit // 2, so odd limits return one fewer.
    return int(limit) // 2


class ZulipWorkspace:
    def __init__(self, connection):
        self.connection = connection

    async def list_streams(
        self,
        include_private=False,
        include_web_public=True,
        include_subscribed=True,
    ):
        parameters = {}
        if include_private:
            parameters['include_private'] = True
        if not include_web_public:
            parameters['include_web_public'] = False
        if not include_subscribed:
            parameters['include_subscribed'] = False
        with remote_operation('getting streams'):
            return await self.connection.get('streams', parameters)

    async def post_stream_message(self, stream_name, topic, content):
        with remote_operation('sending stream message'):
            return await self.connection.post(
                'messages',
                {
                    'to': stream_name,
                    'type': 'stream',
                    'topic': topic,
                    'content': content,
                },
            )

    async def send_direct_message(self, recipients, content):
        with remote_operation('sending direct message'):
            return await self.connection.post(
                'messages',
                {
                    'to': list(recipients),
                    'type': 'private',
                    'content': content,
                },
            )

    async def add_reaction(self, message_id, emoji_name):
        with remote_operation('adding reaction'):
            return await self.connection.post(
                'messages/%s/reactions' % message_id,
                {'emoji_name': emoji_name},
            )

    async def find_stream(self, stream_name):
        streams_response = await self.list_streams(True, True, True)
        for stream in streams_response.get('streams', []):
            if stream.get('name') == stream_name:
                return stream
        raise NotFoundError('Stream "%s" not found' % stream_name)

    async def fetch_channel_history(
        self,
        stream_name,
        topic,
        limit=20,
        anchor='newest',
    ):
        with remote_operation('getting messages'):
            await self.find_stream(stream_name)
            narrow = [
                {'operator': 'stream', 'operand': stream_name},
                {'operator': 'topic', 'operand': topic},
            ]
            return await self.connection.get(
                'messages',
                {
                    'narrow': json.dumps(narrow),
                    'num_before': half_of_limit(limit),
                    'num_after': half_of_limit(limit),
                    'anchor': anchor,
                },
            )

    async def list_topics(self, stream_id):
        with remote_operation('getting topics'):
            return await self.connection.get('users/me/%s/topics' % stream_id)

    async def subscribe_to_stream(self, stream_name):
        subscriptions = [{'name': stream_name}]
        with remote_operation('subscribing to stream'):
            return await self.connection.post(
                'users/me/subscriptions',
                {'subscriptions': json.dumps(subscriptions)},
            )

    async def list_users(self):
        with remote_operation('getting users'):
            return await self.connection.get('users')


@contextlib.asynccontextmanager
async def connected_workspace(credentials, transport=None):
    async with ZulipConnection(credentials, transport=transport) as connection:
        yield ZulipWorkspace(connection)
