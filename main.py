#!/usr/bin/env python3
"""Prototype Agent CLI."""

import sys
import uuid
import asyncio
import logging
import argparse
from typing import Any

from config.settings import Settings
from llm.factory import create_llm_client_from_settings, LLMProvider
from memory.store import MemoryStore
from project.paths import ProjectPaths
from agent.prompts import MODES, list_modes
from agent.service import AgentService
from agent.tools import ToolExecutor
from schemas.events import HostChannel

logger = logging.getLogger(__name__)


class ConsoleHost:
    """Display host that prints agent events to the terminal."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self._streamed = set()

    def send(self, channel: str, payload: Any = None) -> None:
        if channel == HostChannel.CHAT_STREAM.value:
            message_id = payload["messageId"]
            if payload["isComplete"]:
                if payload["delta"] and message_id not in self._streamed:
                    self.stream.write(payload["delta"])
                    self._streamed.add(message_id)
                elif not payload["delta"] and message_id in self._streamed:
                    self.stream.write("\n")
                    self._streamed.discard(message_id)
            elif payload["delta"]:
                self._streamed.add(message_id)
                self.stream.write(payload["delta"])
        elif channel == HostChannel.PREVIEW_RELOAD.value:
            self.stream.write("[preview updated]\n")
        elif channel == HostChannel.CHAT_ERROR.value:
            self.stream.write(f"Error: {payload}\n")
        self.stream.flush()


def build_service(settings: Settings, host: ConsoleHost) -> AgentService:
    """Wire the LLM client, memory store and tool executor."""
    llm_client = create_llm_client_from_settings(settings)
    paths = ProjectPaths(settings.data_dir, settings.prototypes_dir_name)
    memory_store = MemoryStore(
        paths,
        settings.data_dir,
        max_persisted_turns=settings.max_persisted_turns
    )
    return AgentService(
        llm_client=llm_client,
        tool_executor=ToolExecutor(paths, memory_store),
        memory_store=memory_store,
        host=host,
        max_iterations=settings.max_iterations,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        summarize_after_turns=settings.summarize_after_turns,
        default_mode=settings.default_mode
    )


async def run_session(service: AgentService, mode: str, project_id: str, clear: bool):
    """Read user messages from stdin until /quit or EOF."""
    service.initialize(mode, project_id)
    if clear:
        service.clear_history()

    print(f"Project {project_id} ({mode}). Commands: /clear, /mode <name>, /quit")
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        line = line.strip()
        if not line:
            continue
        if line == "/quit":
            break
        if line == "/clear":
            service.clear_history()
            print("History cleared.")
            continue
        if line.startswith("/mode"):
            new_mode = line[len("/mode"):].strip()
            if new_mode not in MODES:
                print(f"Unknown mode. Choose from: {', '.join(MODES)}")
                continue
            service.set_mode(new_mode)
            print(f"Mode set to {new_mode}.")
            continue

        await service.send_message(line)

    await service.wait_for_background_tasks()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Prototype Agent - describe a UI and iterate on a live prototype"
    )
    parser.add_argument(
        "--project",
        "-p",
        type=str,
        help="Project ID to open (default: a new project)"
    )
    parser.add_argument(
        "--mode",
        "-m",
        type=str,
        choices=list(MODES),
        help="Agent mode (default: rapid-prototype)"
    )
    parser.add_argument(
        "--provider",
        type=str,
        choices=[p.value for p in LLMProvider],
        default="anthropic",
        help="LLM provider (default: anthropic)"
    )
    parser.add_argument(
        "--model",
        type=str,
        help="Override the provider's default model"
    )
    parser.add_argument(
        "--new",
        action="store_true",
        help="Start with an empty conversation even if the project has memory"
    )
    parser.add_argument(
        "--list-modes",
        action="store_true",
        help="List available modes and exit"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    if args.list_modes:
        for mode in list_modes():
            print(f"{mode.id:<16} {mode.description}")
        return

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    settings = Settings(
        llm_provider=args.provider,
        llm_model=args.model,
        verbose=args.verbose,
    )

    try:
        service = build_service(settings, ConsoleHost())
        asyncio.run(run_session(
            service,
            mode=args.mode or settings.default_mode,
            project_id=args.project or uuid.uuid4().hex[:12],
            clear=args.new
        ))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
