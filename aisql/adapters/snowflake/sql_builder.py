"""SQL statement builder for Cortex AISQL function calls.

Every statement selects a single column named RESULT. User text is always
bound as a parameter (pyformat, ``%(name)s``); only option objects, extraction
formats, aspect and category lists are rendered as SQL constants because the
functions expect constant OBJECT/ARRAY arguments there.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from aisql.domain.entities.ai_call import AICall
from aisql.domain.errors import InvalidCallError
from aisql.domain.value_objects.enums import AIFunction
from aisql.domain.value_objects.file_ref import FileRef


@dataclass(frozen=True)
class SqlStatement:
    sql: str
    params: dict[str, Any] = field(default_factory=dict)


# ─── Literal rendering ──────────────────────────────────────────────


def quote_string(value: str) -> str:
    """Quote *value* as a SQL string constant.

    ``%`` is doubled because every statement that renders constants also
    binds parameters, so it goes through the connector's pyformat interpolation.
    """
    escaped = value.replace("\\", "\\\\").replace("'", "''").replace("%", "%%")
    return f"'{escaped}'"


def to_sql_literal(value: Any) -> str:
    """Render a Python value as a Snowflake constant (OBJECT, ARRAY, scalar)."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, Mapping):
        items = ", ".join(f"{quote_string(str(k))}: {to_sql_literal(v)}" for k, v in value.items())
        return "{" + items + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_sql_literal(v) for v in value) + "]"
    raise TypeError(f"Cannot render {type(value).__name__} as a SQL literal")


def _file_expr(ref: FileRef, params: dict[str, Any], suffix: str = "") -> str:
    params[f"stage{suffix}"] = ref.stage
    params[f"path{suffix}"] = ref.path
    return f"TO_FILE(%(stage{suffix})s, %(path{suffix})s)"


def _input_expr(payload: Any, params: dict[str, Any], name: str = "text", suffix: str = "") -> str:
    if isinstance(payload, FileRef):
        return _file_expr(payload, params, suffix)
    params[f"{name}{suffix}"] = payload
    return f"%({name}{suffix})s"


def _select(expr: str, params: dict[str, Any], from_clause: str = "") -> SqlStatement:
    sql = f"SELECT {expr} AS RESULT"
    if from_clause:
        sql += f" {from_clause}"
    return SqlStatement(sql=sql, params=params)


_FLATTEN_ROWS = "FROM TABLE(FLATTEN(INPUT => PARSE_JSON(%(rows)s))) f"


# ─── Per-function builders ──────────────────────────────────────────


def _sentiment(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {}
    args = [_input_expr(call.payload, params)]
    aspects = call.params.get("aspects")
    if aspects:
        args.append(to_sql_literal(list(aspects)))
    return _select(f"AI_SENTIMENT({', '.join(args)})", params)


def _extract(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {}
    response_format = to_sql_literal(call.params["response_format"])
    if isinstance(call.payload, FileRef):
        source = f"file => {_file_expr(call.payload, params)}"
    else:
        params["text"] = call.payload
        source = "text => %(text)s"
    return _select(f"AI_EXTRACT({source}, responseFormat => {response_format})", params)


def _embed(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {"model": call.model}
    return _select(f"AI_EMBED(%(model)s, {_input_expr(call.payload, params)})", params)


def _similarity(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {}
    first, second = call.payload
    a = _input_expr(first, params, name="input", suffix="1")
    b = _input_expr(second, params, name="input", suffix="2")
    return _select(f"AI_SIMILARITY({a}, {b})", params)


def _translate(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {
        "text": call.payload,
        "source_language": call.params.get("source_language") or "",
        "target_language": call.params["target_language"],
    }
    return _select("AI_TRANSLATE(%(text)s, %(source_language)s, %(target_language)s)", params)


def _summarize(call: AICall) -> SqlStatement:
    return _select("SNOWFLAKE.CORTEX.SUMMARIZE(%(text)s)", {"text": call.payload})


def _summarize_agg(call: AICall) -> SqlStatement:
    params = {"rows": json.dumps(list(call.payload), ensure_ascii=False)}
    return _select("AI_SUMMARIZE_AGG(f.value::STRING)", params, _FLATTEN_ROWS)


def _agg(call: AICall) -> SqlStatement:
    params = {
        "rows": json.dumps(list(call.payload), ensure_ascii=False),
        "instruction": call.params["instruction"],
    }
    return _select("AI_AGG(f.value::STRING, %(instruction)s)", params, _FLATTEN_ROWS)


def _parse_document(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {}
    args = [_file_expr(call.payload, params)]
    if call.options:
        args.append(to_sql_literal(call.options.as_dict()))
    return _select(f"AI_PARSE_DOCUMENT({', '.join(args)})", params)


def _transcribe(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {}
    return _select(f"AI_TRANSCRIBE({_file_expr(call.payload, params)})", params)


def _model_parameters(call: AICall) -> dict[str, Any]:
    options = call.options.as_dict()
    # AI_COMPLETE names the Cortex Guard switch 'guardrails'.
    if "guard_enable" in options:
        options["guardrails"] = options.pop("guard_enable")
    return options


def _complete(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {"model": call.model}
    if isinstance(call.payload, FileRef):
        params["prompt"] = call.params["prompt"]
        prompt = f"PROMPT(%(prompt)s, {_file_expr(call.payload, params)})"
    else:
        params["prompt"] = call.payload
        prompt = "%(prompt)s"

    args = [f"model => %(model)s", f"prompt => {prompt}"]
    model_parameters = _model_parameters(call)
    if model_parameters:
        args.append(f"model_parameters => {to_sql_literal(model_parameters)}")
    return _select(f"AI_COMPLETE({', '.join(args)})", params)


def _count_tokens(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {
        "function_name": call.params.get("function_name") or "ai_complete",
        "text": call.payload,
    }
    if call.model:
        params["model"] = call.model
        expr = "AI_COUNT_TOKENS(%(function_name)s, %(model)s, %(text)s)"
    else:
        expr = "AI_COUNT_TOKENS(%(function_name)s, %(text)s)"
    return _select(expr, params)


def _classify(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {}
    source = _input_expr(call.payload, params)
    categories = to_sql_literal(list(call.params["categories"]))
    return _select(f"AI_CLASSIFY({source}, {categories})", params)


def _filter(call: AICall) -> SqlStatement:
    params: dict[str, Any] = {}
    if isinstance(call.payload, FileRef):
        params["prompt"] = call.params["prompt"]
        expr = f"AI_FILTER(%(prompt)s, {_file_expr(call.payload, params)})"
    else:
        params["text"] = call.payload
        expr = "AI_FILTER(%(text)s)"
    return _select(expr, params)


_BUILDERS = {
    AIFunction.SENTIMENT: _sentiment,
    AIFunction.EXTRACT: _extract,
    AIFunction.EMBED: _embed,
    AIFunction.SIMILARITY: _similarity,
    AIFunction.TRANSLATE: _translate,
    AIFunction.SUMMARIZE: _summarize,
    AIFunction.SUMMARIZE_AGG: _summarize_agg,
    AIFunction.PARSE_DOCUMENT: _parse_document,
    AIFunction.TRANSCRIBE: _transcribe,
    AIFunction.COMPLETE: _complete,
    AIFunction.COUNT_TOKENS: _count_tokens,
    AIFunction.CLASSIFY: _classify,
    AIFunction.FILTER: _filter,
    AIFunction.AGG: _agg,
}


def build_statement(call: AICall) -> SqlStatement:
    """Build the single-row SELECT that runs *call*.

    Raises:
        InvalidCallError: if an argument cannot be rendered as SQL.
    """
    try:
        return _BUILDERS[call.function](call)
    except (TypeError, KeyError) as e:
        raise InvalidCallError(f"Cannot build {call.function.sql_name} statement: {e}") from e
