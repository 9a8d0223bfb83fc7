#!/usr/bin/env python3
"""
Scripture Resolver Python Bridge

This module provides a JSON-based subprocess interface for the presentation
app to:
1. Resolve spoken or typed references into passages ("resolve")
2. Extract every reference from a block of text ("parse_references")
3. Inspect or clear the conversational context ("get_context", "reset_context")

Protocol: reads one JSON command per stdin line and writes one JSON response
per stdout line, {"type": "result", ...} or {"type": "error", ...}. A single
resolver session lives for the whole process, so "verse 17" after
"John 3:16" resolves to John 3:17.

Environment:
    SCRIPTURE_BOOK_MAPPING: JSON file mapping book spellings to app identifiers
    SCRIPTURE_RESOLVER_VERBOSE: "1" to print resolver diagnostics to stderr
"""

import sys
import json
import os
import traceback
from typing import Optional, Dict, Any

# Ensure proper stdout encoding for JSON output
for _stream in (sys.stdout, sys.stderr):
    if hasattr(_stream, 'reconfigure'):
        _stream.reconfigure(encoding='utf-8')  # type: ignore[union-attr]

from book_catalog import BookCatalog, DEFAULT_CATALOG
from reference_extractor import parse_bible_references
from reference_resolver import ReferenceResolver, ResolverSession


# ============================================================================
# OUTPUT
# ============================================================================

def emit_error(error: str, command: Optional[str] = None):
    """Emit an error to stdout as JSON."""
    result = {
        "type": "error",
        "error": error,
        "command": command
    }
    print(json.dumps(result), flush=True)


def emit_result(data: Dict[str, Any]):
    """Emit a result to stdout as JSON."""
    result = {
        "type": "result",
        **data
    }
    print(json.dumps(result), flush=True)


# ============================================================================
# SESSION (created on first use)
# ============================================================================

_session: Optional[ResolverSession] = None


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').strip().lower() in ('1', 'true', 'yes', 'on')


def load_catalog() -> BookCatalog:
    """Book catalog from SCRIPTURE_BOOK_MAPPING, or the built-in one."""
    mapping_path = os.environ.get('SCRIPTURE_BOOK_MAPPING')
    if not mapping_path:
        return DEFAULT_CATALOG
    print(f"Loading book mapping from {mapping_path}", file=sys.stderr)
    return BookCatalog.from_file(mapping_path)


def get_session() -> ResolverSession:
    global _session
    if _session is None:
        resolver = ReferenceResolver(
            catalog=load_catalog(),
            verbose=_env_flag('SCRIPTURE_RESOLVER_VERBOSE'),
        )
        _session = ResolverSession(resolver)
    return _session


# ============================================================================
# COMMANDS
# ============================================================================

def resolve_reference(text: str) -> Dict[str, Any]:
    session = get_session()
    passages = session.resolve(text)
    result = session.last_result
    return {
        'passages': [p.to_dict() for p in passages] if passages else None,
        'tier': result.tier if result else None,
        'outcomes': [o.to_dict() for o in result.outcomes] if result else [],
        'context': session.context.to_dict(),
    }


def parse_references(text: str) -> Dict[str, Any]:
    parsed = parse_bible_references(text)
    catalog = get_session().resolver.catalog
    return {
        'references': [
            {'book': ref.book, 'chapter': ref.chapter, 'verses': ref.verses}
            for ref in parsed.references
        ],
        'passages': [p.to_dict() for p in parsed.passages(catalog)],
        'text': parsed.text(),
    }


def check_dependencies() -> Dict[str, Any]:
    """Check if all required Python packages are installed."""
    deps: Dict[str, Any] = {
        'text2digits': False,
    }

    try:
        from text2digits import text2digits  # noqa: F401
        deps['text2digits'] = True
    except ImportError:
        pass

    return {
        'dependencies': deps,
        'all_installed': all(v for k, v in deps.items() if isinstance(v, bool)),
    }


def handle_command(command: Dict[str, Any]) -> Dict[str, Any]:
    """Handle a command from the presentation app."""
    cmd_type = command.get('command')

    if cmd_type == 'resolve':
        text = command.get('text')
        if not isinstance(text, str):
            raise ValueError("text is required")
        return resolve_reference(text)

    elif cmd_type == 'parse_references':
        text = command.get('text')
        if not isinstance(text, str):
            raise ValueError("text is required")
        return parse_references(text)

    elif cmd_type == 'get_context':
        session = get_session()
        return session.state.to_dict()

    elif cmd_type == 'reset_context':
        session = get_session()
        session.reset()
        return session.state.to_dict()

    elif cmd_type == 'check_dependencies':
        return check_dependencies()

    else:
        raise ValueError(f"Unknown command: {cmd_type}")


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def process_line(line: str):
    """Parse one stdin line as a command and emit its response."""
    try:
        command = json.loads(line)
    except json.JSONDecodeError as e:
        emit_error(f"Invalid JSON input: {e}")
        return
    if not isinstance(command, dict):
        emit_error("Command must be a JSON object")
        return

    try:
        result = handle_command(command)
        emit_result(result)
    except Exception as e:
        emit_error(f"Error processing command: {e}\n{traceback.format_exc()}", command.get('command'))


def main():
    """
    Main entry point for subprocess mode.
    Reads JSON commands from stdin, one per line, until EOF.
    """
    for line in sys.stdin:
        if not line.strip():
            continue
        process_line(line)


if __name__ == "__main__":
    main()
