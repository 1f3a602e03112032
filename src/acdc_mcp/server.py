"""STDIO MCP server entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from acdc_mcp.app import KnowledgeBase, build_knowledge_base
from acdc_mcp.config import CONFIG_FILE_NAME, CliOverrides, load_effective_config
from acdc_mcp.discovery import StartupError
from acdc_mcp.logging import (
    LOG_LEVELS,
    AuditEvent,
    JsonlAuditLogger,
    configure_logging,
    sanitize_request,
    utc_timestamp,
)
from acdc_mcp.prompts import PromptArgumentError, PromptNotFoundError
from acdc_mcp.resources import ResourceNotFoundError, ResourceUnavailableError
from acdc_mcp.tools.builtin import register_builtin_tools
from acdc_mcp.tools.registry import ToolDispatchError, ToolRegistry

logger = logging.getLogger(__name__)

MethodHandler = Callable[[dict[str, object]], dict[str, object]]


@dataclass(slots=True, frozen=True)
class Request:
    """Normalized incoming request."""

    request_id: str
    method: str
    params: dict[str, object]


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for server startup configuration."""
    parser = argparse.ArgumentParser(prog="acdc-mcp")
    parser.add_argument("--config", required=False, default=CONFIG_FILE_NAME)
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--scheme", required=False, default=None)
    parser.add_argument("--cross-ref", choices=("true", "false"), required=False, default=None)
    parser.add_argument("--max-results", type=int, required=False, default=None)
    parser.add_argument("--log-level", choices=LOG_LEVELS, required=False, default="INFO")
    return parser


class StdioServer:
    """Minimal deterministic STDIO server for resource, prompt and tool routing."""

    def __init__(self, knowledge: KnowledgeBase) -> None:
        self._knowledge = knowledge
        self._config = knowledge.config
        self._audit_logger = JsonlAuditLogger(path=self._config.data_dir / "audit.jsonl")
        self._registry = ToolRegistry()
        register_builtin_tools(
            self._registry,
            search=knowledge.index.search,
            read_resource=knowledge.resources.read_resource,
            describe=self._config.tool_description,
        )
        self._methods: dict[str, MethodHandler] = {
            "server/info": self._server_info,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }
        self._fallback_request_counter = 0

    @property
    def knowledge(self) -> KnowledgeBase:
        return self._knowledge

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> None:
        """Process JSON-line requests from stdin and write JSON-line responses."""
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            response = self.handle_json_line(line)
            out_stream.write(f"{json.dumps(response, sort_keys=True)}\n")
            out_stream.flush()

    def close(self) -> None:
        """Release knowledge base resources."""
        self._knowledge.close()

    def handle_json_line(self, raw_line: str) -> dict[str, object]:
        """Handle a single JSON-line request."""
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            request_id = self.next_request_id()
            response = self.error_response(
                request_id=request_id,
                code="INVALID_JSON",
                message="Request must be valid JSON.",
            )
            self.log_request(
                request_id=request_id,
                method="invalid_json",
                arguments={"raw_line_length": len(raw_line)},
                response=response,
            )
            return response
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> dict[str, object]:
        """Validate and dispatch a parsed payload."""
        parsed = self.parse_request(payload)
        if isinstance(parsed, dict):
            request_id_value = parsed.get("request_id")
            request_id = (
                request_id_value if isinstance(request_id_value, str) else self.next_request_id()
            )
            self.log_request(
                request_id=request_id,
                method="invalid_request",
                arguments={},
                response=parsed,
            )
            return parsed

        request = parsed
        try:
            handler = self._methods.get(request.method)
            if handler is None:
                raise ToolDispatchError(
                    code="UNKNOWN_METHOD", message=f"Unknown method: {request.method}"
                )
            result = handler(request.params)
        except ToolDispatchError as error:
            response = self.error_response(
                request_id=request.request_id,
                code=error.code,
                message=error.message,
            )
        except Exception:
            logger.exception("Unhandled error while executing %s", request.method)
            response = self.error_response(
                request_id=request.request_id,
                code="INTERNAL_ERROR",
                message="Unhandled server error while executing request.",
            )
        else:
            response = self.success_response(request_id=request.request_id, result=result)

        self.log_request(
            request_id=request.request_id,
            method=request.method,
            arguments=request.params,
            response=response,
        )
        return response

    def parse_request(self, payload: object) -> Request | dict[str, object]:
        """Validate request payload and return normalized Request."""
        if not isinstance(payload, dict):
            return self.error_response(
                request_id=self.next_request_id(),
                code="INVALID_REQUEST",
                message="Request must be an object.",
            )

        request_id = self.extract_request_id(payload.get("id"))
        method = payload.get("method")
        params = payload.get("params", {})

        if not isinstance(method, str) or not method:
            return self.error_response(
                request_id=request_id,
                code="INVALID_REQUEST",
                message="Request method must be a non-empty string.",
            )
        if not isinstance(params, dict):
            return self.error_response(
                request_id=request_id,
                code="INVALID_PARAMS",
                message="Request params must be an object.",
            )

        return Request(request_id=request_id, method=method, params=params)

    def extract_request_id(self, request_id: object) -> str:
        """Extract request ID from payload or synthesize deterministic fallback."""
        if isinstance(request_id, str) and request_id:
            return request_id
        if isinstance(request_id, int) and not isinstance(request_id, bool):
            return str(request_id)
        return self.next_request_id()

    def next_request_id(self) -> str:
        """Generate deterministic fallback request IDs for invalid/missing IDs."""
        self._fallback_request_counter += 1
        return f"req-{self._fallback_request_counter:06d}"

    @staticmethod
    def success_response(
        request_id: str,
        result: dict[str, object],
        warnings: list[str] | None = None,
    ) -> dict[str, object]:
        """Build success envelope."""
        return {
            "request_id": request_id,
            "ok": True,
            "result": result,
            "warnings": warnings or [],
        }

    @staticmethod
    def error_response(request_id: str, code: str, message: str) -> dict[str, object]:
        """Build explicit error envelope."""
        return {
            "request_id": request_id,
            "ok": False,
            "result": {},
            "warnings": [],
            "error": {"code": code, "message": message},
        }

    def log_request(
        self,
        request_id: str,
        method: str,
        arguments: dict[str, object],
        response: dict[str, object],
    ) -> None:
        """Log one sanitized request event."""
        error_payload = response.get("error")
        error_code: str | None = None
        if isinstance(error_payload, dict):
            code_value = error_payload.get("code")
            if isinstance(code_value, str):
                error_code = code_value
        event = AuditEvent(
            timestamp=utc_timestamp(),
            request_id=request_id,
            method=method,
            ok=bool(response.get("ok", False)),
            error_code=error_code,
            metadata=sanitize_request(method, arguments),
        )
        self._audit_logger.append(event)

    def _server_info(self, _: dict[str, object]) -> dict[str, object]:
        server = self._config.server
        return {
            "name": server.name,
            "version": server.version,
            "instructions": self._knowledge.instructions,
            "sources": [
                {"name": location.name, "description": location.description}
                for location in self._config.content
            ],
            "resource_count": len(self._knowledge.resources),
            "prompt_count": len(self._knowledge.prompts),
            "indexed_document_count": self._knowledge.index.document_count,
            "effective_config": self._config.to_public_dict(),
        }

    def _list_resources(self, _: dict[str, object]) -> dict[str, object]:
        return {
            "resources": [
                {
                    "uri": definition.uri,
                    "name": definition.name,
                    "description": definition.description,
                    "mime_type": definition.mime_type,
                    "source": definition.source,
                }
                for definition in self._knowledge.resources.list_resources()
            ]
        }

    def _read_resource(self, params: dict[str, object]) -> dict[str, object]:
        uri = _required_string(params, "uri", "resources/read")
        try:
            text = self._knowledge.resources.read_resource(uri)
        except ResourceNotFoundError as error:
            raise ToolDispatchError(code="NOT_FOUND", message=str(error)) from error
        except ResourceUnavailableError as error:
            raise ToolDispatchError(code="READ_FAILED", message=str(error)) from error
        definition = self._knowledge.resources.get(uri)
        mime_type = definition.mime_type if definition is not None else "text/markdown"
        return {"contents": [{"uri": uri, "mime_type": mime_type, "text": text}]}

    def _list_prompts(self, _: dict[str, object]) -> dict[str, object]:
        return {
            "prompts": [
                {
                    "name": definition.name,
                    "description": definition.description,
                    "arguments": [
                        {
                            "name": argument.name,
                            "description": argument.description,
                            "required": argument.required,
                        }
                        for argument in definition.arguments
                    ],
                }
                for definition in self._knowledge.prompts.list_prompts()
            ]
        }

    def _get_prompt(self, params: dict[str, object]) -> dict[str, object]:
        name = _required_string(params, "name", "prompts/get")
        raw_arguments = params.get("arguments", {})
        if not isinstance(raw_arguments, dict) or not all(
            isinstance(value, str) for value in raw_arguments.values()
        ):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="prompts/get params.arguments must map names to strings.",
            )
        try:
            text = self._knowledge.prompts.get_prompt(name, raw_arguments)
        except PromptNotFoundError as error:
            raise ToolDispatchError(code="NOT_FOUND", message=str(error)) from error
        except PromptArgumentError as error:
            raise ToolDispatchError(code="INVALID_PARAMS", message=str(error)) from error
        return {
            "name": name,
            "messages": [{"role": "user", "content": {"type": "text", "text": text}}],
        }

    def _list_tools(self, _: dict[str, object]) -> dict[str, object]:
        return {"tools": [spec.to_dict() for spec in self._registry.specs()]}

    def _call_tool(self, params: dict[str, object]) -> dict[str, object]:
        tool_name = params.get("name")
        arguments = params.get("arguments", {})
        if not isinstance(tool_name, str) or not tool_name:
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="tools/call params.name must be a non-empty string.",
            )
        if not isinstance(arguments, dict):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="tools/call params.arguments must be an object.",
            )
        return self._registry.dispatch(name=tool_name, arguments=arguments)


def create_server(
    config_path: str,
    cli_overrides: CliOverrides | None = None,
) -> StdioServer:
    """Create a configured STDIO server instance with its knowledge base built."""
    config = load_effective_config(config_path=Path(config_path), overrides=cli_overrides)
    return StdioServer(knowledge=build_knowledge_base(config))


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the knowledge base server process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    cross_ref: bool | None = None
    if args.cross_ref == "true":
        cross_ref = True
    if args.cross_ref == "false":
        cross_ref = False
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        scheme=args.scheme,
        cross_ref=cross_ref,
        max_results=args.max_results,
    )
    try:
        server = create_server(config_path=args.config, cli_overrides=overrides)
    except (ValueError, StartupError) as error:
        logger.error("Startup failed: %s", error)
        return 1
    try:
        server.serve(in_stream=sys.stdin, out_stream=sys.stdout)
    finally:
        server.close()
    return 0


def _required_string(params: dict[str, object], key: str, method: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise ToolDispatchError(
            code="INVALID_PARAMS",
            message=f"{method} params.{key} must be a non-empty string.",
        )
    return value
