"""Agent service: the bounded tool-calling loop behind a prototyping session."""

import uuid
import asyncio
import logging
from typing import Optional, List, Sequence, Set

from llm.base_client import BaseLLMClient
from memory.store import MemoryStore
from schemas.conversation import (
    Role,
    TextBlock,
    ImageSource,
    ImageBlock,
    ToolResultBlock,
    ConversationTurn,
    Attachment,
    ChatMessage,
    ImageInput,
    ToolCallStatus,
    ToolCallSummary,
)
from schemas.events import HostChannel, ChatStreamPayload
from .host import DisplayHost
from .prompts import get_system_prompt
from .tools import ToolExecutor

logger = logging.getLogger(__name__)

FALLBACK_PROJECT_NAME = "Untitled Prototype"

PROJECT_NAME_PROMPT = (
    "Generate a short, descriptive name (2-5 words) for a UI prototype based on "
    "this request. Reply with the name only, no quotes or punctuation.\n\nRequest: {text}"
)

SUMMARY_PROMPT = (
    "Summarize this prototyping conversation in 2-3 sentences. Focus on what is "
    "being built, the design decisions made, and any user preferences.\n\n{transcript}"
)


def _new_id() -> str:
    return uuid.uuid4().hex


class AgentService:
    """
    Conversational prototyping agent.

    Holds the conversation for one active project and drives the model
    through a tool-calling loop, streaming output to a display host. One
    send_message call is expected at a time per instance; overlapping calls
    would interleave writes to the shared history.
    """

    MAX_ITERATIONS = 10
    SUMMARIZE_AFTER_TURNS = 10
    SUMMARY_SOURCE_TURNS = 20
    SUMMARY_SEPARATOR = "\n---\n"

    def __init__(
        self,
        llm_client: BaseLLMClient,
        tool_executor: ToolExecutor,
        memory_store: Optional[MemoryStore] = None,
        host: Optional[DisplayHost] = None,
        max_iterations: int = MAX_ITERATIONS,
        max_tokens: int = 8192,
        temperature: float = 0.7,
        summarize_after_turns: int = SUMMARIZE_AFTER_TURNS,
        default_mode: str = "rapid-prototype"
    ):
        """
        Initialize agent service.

        Args:
            llm_client: Async LLM client
            tool_executor: Executor for the model's tool calls
            memory_store: Optional store for project and global memory
            host: Display host receiving stream, reload and error events
            max_iterations: Cap on model calls per send_message
            max_tokens: Output budget per model call
            temperature: Sampling temperature
            summarize_after_turns: History length that triggers summarization
            default_mode: Mode used before initialize is called
        """
        self.llm_client = llm_client
        self.tool_executor = tool_executor
        self.memory_store = memory_store
        self.host = host
        self.max_iterations = max_iterations
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.summarize_after_turns = summarize_after_turns

        self.mode = default_mode
        self.project_id: Optional[str] = None
        self.conversation_history: List[ConversationTurn] = []
        self.chat_messages: List[ChatMessage] = []
        self.summary: Optional[str] = None
        self.key_facts: List[str] = []

        self._background_tasks: Set[asyncio.Task] = set()

    # ---- Session state ----

    def initialize(self, mode: str, project_id: str):
        """
        Start a session on a project, replacing all in-memory state.

        Restores the project's persisted memory when available.
        """
        self.mode = mode
        self.project_id = project_id

        memory = self.memory_store.load_project_memory(project_id) if self.memory_store else None
        if memory:
            self.conversation_history = _drop_orphaned_turns(memory.conversation_history)
            self.chat_messages = list(memory.chat_messages)
            self.summary = memory.summary
            self.key_facts = list(memory.key_facts)
            logger.info(
                f"Restored {len(self.conversation_history)} turns for project {project_id}"
            )
        else:
            self.conversation_history = []
            self.chat_messages = []
            self.summary = None
            self.key_facts = []

    def set_mode(self, mode: str):
        self.mode = mode

    def clear_history(self):
        """Forget the conversation, display messages, summary and key facts."""
        self.conversation_history = []
        self.chat_messages = []
        self.summary = None
        self.key_facts = []

    def get_history(self) -> List[ConversationTurn]:
        return self.conversation_history

    def get_chat_messages(self) -> List[ChatMessage]:
        return self.chat_messages

    # ---- Main loop ----

    def _build_system_prompt(self) -> str:
        global_entries = []
        if self.memory_store:
            global_entries = self.memory_store.load_global_memory().entries
        return get_system_prompt(
            self.mode,
            self.project_id or "",
            summary=self.summary,
            key_facts=self.key_facts,
            global_entries=global_entries
        )

    @staticmethod
    def _emit_stream(host: DisplayHost, message_id: str, delta: str, is_complete: bool):
        payload = ChatStreamPayload(message_id=message_id, delta=delta, is_complete=is_complete)
        host.send(HostChannel.CHAT_STREAM.value, payload.model_dump(by_alias=True))

    def _append_user_turn(self, text: str, images: Sequence[ImageInput]):
        content = [
            ImageBlock(source=ImageSource(media_type=image.mime_type, data=image.data))
            for image in images
        ]
        content.append(TextBlock(text=text))
        self.conversation_history.append(ConversationTurn(role=Role.USER, content=content))

        attachments = [
            Attachment(
                id=_new_id(),
                type="image",
                mime_type=image.mime_type,
                size=len(image.data) * 3 // 4
            )
            for image in images
        ]
        self.chat_messages.append(ChatMessage(
            id=_new_id(),
            role=Role.USER,
            content=text,
            attachments=attachments or None
        ))

    async def send_message(
        self,
        text: str,
        images: Optional[Sequence[ImageInput]] = None,
        host: Optional[DisplayHost] = None
    ):
        """
        Send a user message and run the tool-calling loop to completion.

        Text from every model response is streamed as non-final deltas; the
        final tool-free response is also sent as one complete delta, followed
        by an empty completion event and a preview reload. Any failure is
        reported as a single chat:error event.

        Args:
            text: User message
            images: Optional base64 images sent before the text
            host: Display host for this call (defaults to the service's host)
        """
        host = host or self.host
        if host is None:
            logger.debug("No display host attached, ignoring message")
            return

        try:
            self._append_user_turn(text, [ImageInput.model_validate(i) for i in images or []])
            message_id = _new_id()
            response_texts: List[str] = []
            tool_calls: List[ToolCallSummary] = []
            tools = self.tool_executor.get_tools()

            for iteration in range(self.max_iterations):
                logger.info(f"Agent iteration {iteration + 1}/{self.max_iterations}")

                response = await self.llm_client.chat(
                    messages=self.conversation_history,
                    system=self._build_system_prompt(),
                    tools=tools,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens
                )
                self.conversation_history.append(
                    ConversationTurn(role=Role.ASSISTANT, content=list(response.content))
                )

                for block in response.content:
                    if isinstance(block, TextBlock) and block.text.strip():
                        self._emit_stream(host, message_id, block.text, False)
                if response.text:
                    response_texts.append(response.text)

                tool_uses = response.tool_uses
                if not tool_uses:
                    if response.text:
                        self._emit_stream(host, message_id, response.text, True)
                    break

                results = []
                for tool_use in tool_uses:
                    logger.info(f"Executing tool: {tool_use.name}")
                    output = await self.tool_executor.execute_tool_call(
                        tool_use.name,
                        tool_use.input,
                        self.project_id or ""
                    )
                    results.append(ToolResultBlock(tool_use_id=tool_use.id, content=output))
                    tool_calls.append(ToolCallSummary(
                        id=tool_use.id,
                        name=tool_use.name,
                        input=tool_use.input,
                        status=_tool_status(tool_use.name, output),
                        result=output
                    ))

                self.conversation_history.append(ConversationTurn(role=Role.USER, content=results))
            else:
                logger.warning(
                    f"Agent stopped after {self.max_iterations} iterations with tool calls pending"
                )

            self._emit_stream(host, message_id, "", True)
            host.send(HostChannel.PREVIEW_RELOAD.value)

            if response_texts or tool_calls:
                self.chat_messages.append(ChatMessage(
                    id=message_id,
                    role=Role.ASSISTANT,
                    content="\n\n".join(response_texts),
                    tool_calls=tool_calls or None
                ))

            self._persist()
            self._maybe_summarize()

        except Exception as e:
            logger.error(f"Agent error: {e}")
            host.send(HostChannel.CHAT_ERROR.value, str(e) or type(e).__name__)

    # ---- Persistence ----

    def _persist(self):
        if not (self.memory_store and self.project_id):
            return
        try:
            self.memory_store.save_project_memory(
                self.project_id,
                self.conversation_history,
                self.chat_messages,
                self.summary,
                self.key_facts
            )
        except (OSError, ValueError) as e:
            logger.error(f"Failed to save memory for project {self.project_id}: {e}")

    def _maybe_summarize(self):
        """Start background summarization once the history is long enough."""
        if not (self.memory_store and self.project_id):
            return
        if self.summary or len(self.conversation_history) < self.summarize_after_turns:
            return
        if self._background_tasks:
            logger.debug("Summary already in progress")
            return

        task = asyncio.create_task(
            self._generate_summary(self.project_id, list(self.conversation_history))
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _generate_summary(self, project_id: str, history: List[ConversationTurn]):
        """Summarize the start of a conversation. Failures are only logged."""
        try:
            transcript = self.SUMMARY_SEPARATOR.join(
                f"{turn.role.value.upper()}: {turn.text()}"
                for turn in history[:self.SUMMARY_SOURCE_TURNS]
                if turn.text()
            )
            response = await self.llm_client.chat(
                messages=[ConversationTurn(
                    role=Role.USER,
                    content=[TextBlock(text=SUMMARY_PROMPT.format(transcript=transcript))]
                )],
                temperature=0.3,
                max_tokens=300
            )
            summary = response.text.strip()
            if not summary:
                return

            if self.project_id == project_id:
                self.summary = summary
            self.memory_store.update_project_summary(project_id, summary)
            logger.info(f"Generated summary for project {project_id}")
        except Exception as e:
            logger.error(f"Failed to generate summary: {e}")

    async def wait_for_background_tasks(self):
        """Wait for pending summarization tasks."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    # ---- Naming ----

    async def generate_project_name(self, user_text: str) -> str:
        """Ask the model for a short project name, falling back to a fixed name."""
        try:
            response = await self.llm_client.chat(
                messages=[ConversationTurn(
                    role=Role.USER,
                    content=[TextBlock(text=PROJECT_NAME_PROMPT.format(text=user_text))]
                )],
                temperature=0.5,
                max_tokens=30
            )
            name = response.text.strip()
            return name or FALLBACK_PROJECT_NAME
        except Exception as e:
            logger.warning(f"Project name generation failed: {e}")
            return FALLBACK_PROJECT_NAME


def _drop_orphaned_turns(history: Sequence[ConversationTurn]) -> List[ConversationTurn]:
    """
    Trim a restored history so it starts at a plain user turn.

    The persisted tail can be cut between a tool call and its result; the
    model rejects tool results whose tool call is no longer in the history.
    """
    for start, turn in enumerate(history):
        if turn.role == Role.USER and not any(
            isinstance(block, ToolResultBlock) for block in turn.content
        ):
            if start:
                logger.info(f"Dropped {start} leading turns without a user message")
            return list(history[start:])
    return []


def _tool_status(name: str, output: str) -> ToolCallStatus:
    if output.startswith(f"Error executing {name}:") or output == f"Unknown tool: {name}":
        return ToolCallStatus.ERROR
    return ToolCallStatus.SUCCESS
