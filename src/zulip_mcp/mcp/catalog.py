import collections

from zulip_mcp.errors import ValidationError


PRESENT = 'present'
DEFINED = 'defined'

NO_DEFAULT = object()


class ArgumentSpec:
    def __init__(
        self,
        name,
        json_type,
        description,
        required=False,
        requirement=PRESENT,
        default=NO_DEFAULT,
        item_type=None,
    ):
        self.name = name
        self.json_type = json_type
        self.description = description
        self.required = required
        self.requirement = requirement
        self.default = default
        self.item_type = item_type

    @property
    def has_default(self):
        return self.default is not NO_DEFAULT

    def is_missing_from(self, arguments):
        value = arguments.get(self.name)
        if self.requirement == DEFINED:
            return value is None
        return not value

    def value_from(self, arguments):
        value = arguments.get(self.name)
        if value is None and self.has_default:
            return self.default
        return value

    def as_json_schema(self):
        schema = {
            'type': self.json_type,
            'description': self.description,
        }
        if self.item_type:
            schema['items'] = {'type': self.item_type}
        if self.has_default:
            schema['default'] = self.default
        return schema


class ToolDescriptor:
    def __init__(self, name, description, argument_specs, arguments_type, operation):
        self.name = name
        self.description = description
        self.argument_specs = tuple(argument_specs)
        self.arguments_type = arguments_type
        self.operation = operation

    @property
    def required_argument_names(self):
        return [
            argument_spec.name
            for argument_spec in self.argument_specs
            if argument_spec.required
        ]

    @property
    def input_schema(self):
        schema = {
            'type': 'object',
            'properties': {
                argument_spec.name: argument_spec.as_json_schema()
                for argument_spec in self.argument_specs
            },
        }
        if self.required_argument_names:
            schema['required'] = self.required_argument_names
        return schema

    def missing_argument_names(self, arguments):
        return [
            argument_spec.name
            for argument_spec in self.argument_specs
            if argument_spec.required and argument_spec.is_missing_from(arguments)
        ]

    def validated_arguments(self, arguments):
        missing_argument_names = self.missing_argument_names(arguments)
        if len(missing_argument_names) == 1:
            raise ValidationError(
                'Missing required argument: %s' % missing_argument_names[0]
            )
        if missing_argument_names:
            raise ValidationError(
                'Missing required arguments: %s' % ', '.join(missing_argument_names)
            )
        return self.arguments_type(
            **{
                argument_spec.name: argument_spec.value_from(arguments)
                for argument_spec in self.argument_specs
            }
        )

    async def perform(self, workspace, arguments):
        return await self.operation(workspace, self.validated_arguments(arguments))

    def __repr__(self):
        return '<ToolDescriptor %s>' % self.name


ListChannelsArguments = collections.namedtuple(
    'ListChannelsArguments',
    ['include_private', 'include_web_public', 'include_subscribed'],
)
PostMessageArguments = collections.namedtuple(
    'PostMessageArguments',
    ['channel_name', 'topic', 'content'],
)
SendDirectMessageArguments = collections.namedtuple(
    'SendDirectMessageArguments',
    ['recipients', 'content'],
)
AddReactionArguments = collections.namedtuple(
    'AddReactionArguments',
    ['message_id', 'emoji_name'],
)
GetChannelHistoryArguments = collections.namedtuple(
    'GetChannelHistoryArguments',
    ['channel_name', 'topic', 'limit', 'anchor'],
)
GetTopicsArguments = collections.namedtuple(
    'GetTopicsArguments',
    ['channel_id'],
)
SubscribeToChannelArguments = collections.namedtuple(
    'SubscribeToChannelArguments',
    ['channel_name'],
)
GetUsersArguments = collections.namedtuple('GetUsersArguments', [])


async def list_channels(workspace, arguments):
    return await workspace.list_streams(
        arguments.include_private,
        arguments.include_web_public,
        arguments.include_subscribed,
    )


async def post_message(workspace, arguments):
    return await workspace.post_stream_message(
        arguments.channel_name,
        arguments.topic,
        arguments.content,
    )


async def send_direct_message(workspace, arguments):
    return await workspace.send_direct_message(
        arguments.recipients,
        arguments.content,
    )


async def add_reaction(workspace, arguments):
    return await workspace.add_reaction(
        arguments.message_id,
        arguments.emoji_name,
    )


async def get_channel_history(workspace, arguments):
    return await workspace.fetch_channel_history(
        arguments.channel_name,
        arguments.topic,
        arguments.limit,
        arguments.anchor,
    )


async def get_topics(workspace, arguments):
    return await workspace.list_topics(arguments.channel_id)


async def subscribe_to_channel(workspace, arguments):
    return await workspace.subscribe_to_stream(arguments.channel_name)


async def get_users(workspace, arguments):
    return await workspace.list_users()


TOOL_CATALOG = (
    ToolDescriptor(
        'zulip_list_channels',
        'List available channels (streams) in the Zulip organization',
        [
            ArgumentSpec(
                'include_private',
                'boolean',
                'Whether to include private streams',
                default=False,
            ),
            ArgumentSpec(
                'include_web_public',
                'boolean',
                'Whether to include web-public streams',
                default=True,
            ),
            ArgumentSpec(
                'include_subscribed',
                'boolean',
                'Whether to include streams the bot is subscribed to',
                default=True,
            ),
        ],
        ListChannelsArguments,
        list_channels,
    ),
    ToolDescriptor(
        'zulip_post_message',
        'Post a new message to a Zulip channel (stream)',
        [
            ArgumentSpec(
                'channel_name',
                'string',
                'The name of the stream to post to',
                required=True,
            ),
            ArgumentSpec(
                'topic',
                'string',
                'The topic within the stream',
                required=True,
            ),
            ArgumentSpec(
                'content',
                'string',
                'The message content to post',
                required=True,
            ),
        ],
        PostMessageArguments,
        post_message,
    ),
    ToolDescriptor(
        'zulip_send_direct_message',
        'Send a direct message to one or more users',
        [
            ArgumentSpec(
                'recipients',
                'array',
                'Email addresses or user IDs of recipients',
                required=True,
                item_type='string',
            ),
            ArgumentSpec(
                'content',
                'string',
                'The message content to send',
                required=True,
            ),
        ],
        SendDirectMessageArguments,
        send_direct_message,
    ),
    ToolDescriptor(
        'zulip_add_reaction',
        'Add an emoji reaction to a message',
        [
            ArgumentSpec(
                'message_id',
                'integer',
                'The ID of the message to react to',
                required=True,
                requirement=DEFINED,
            ),
            ArgumentSpec(
                'emoji_name',
                'string',
                'Emoji name without colons',
                required=True,
            ),
        ],
        AddReactionArguments,
        add_reaction,
    ),
    ToolDescriptor(
        'zulip_get_channel_history',
        'Get recent messages from a channel (stream) and topic',
        [
            ArgumentSpec(
                'channel_name',
                'string',
                'The name of the stream',
                required=True,
            ),
            ArgumentSpec(
                'topic',
                'string',
                'The topic name',
                required=True,
            ),
            ArgumentSpec(
                'limit',
                'integer',
                'Number of messages to retrieve (default 20)',
                default=20,
            ),
            ArgumentSpec(
                'anchor',
                'string',
                "Message ID to start from (default 'newest')",
                default='newest',
            ),
        ],
        GetChannelHistoryArguments,
        get_channel_history,
    ),
    ToolDescriptor(
        'zulip_get_topics',
        'Get topics in a channel (stream)',
        [
            ArgumentSpec(
                'channel_id',
                'integer',
                'The ID of the stream',
                required=True,
                requirement=DEFINED,
            ),
        ],
        GetTopicsArguments,
        get_topics,
    ),
    ToolDescriptor(
        'zulip_subscribe_to_channel',
        'Subscribe the bot to a channel (stream)',
        [
            ArgumentSpec(
                'channel_name',
                'string',
                'The name of the stream to subscribe to',
                required=True,
            ),
        ],
        SubscribeToChannelArguments,
        subscribe_to_channel,
    ),
    ToolDescriptor(
        'zulip_get_users',
        'Get list of users in the Zulip organization',
        [],
        GetUsersArguments,
        get_users,
    ),
)


TOOL_NAMES = tuple(descriptor.name for descriptor in TOOL_CATALOG)
