"""
Expression resolution for node parameters.

A parameter can reference the item being processed with Jinja2 syntax:
"{{ json.text }}" yields the field's own value (numbers, lists and objects
stay what they are), while mixed text like "Hi {{ json.name }}" renders
to a string. Evaluation runs in Jinja2's sandbox.
"""
import logging
import re
from typing import Any, Dict

from jinja2 import Undefined
from jinja2.sandbox import SandboxedEnvironment

logger = logging.getLogger(__name__)

_SINGLE_EXPRESSION = re.compile(r"^\s*\{\{(?P<expr>(?:(?!\}\}).)*)\}\}\s*$", re.S)


class ExpressionResolver:
    """Resolves expressions in a node configuration against one item's variables."""

    def __init__(self, variables: Dict[str, Any]):
        self.env = SandboxedEnvironment()
        self.variables = variables

    def resolve(self, value: Any) -> Any:
        """Resolve strings anywhere inside dicts and lists; other values pass through."""
        if isinstance(value, str):
            return self._resolve_string(value)
        if isinstance(value, dict):
            return {key: self.resolve(v) for key, v in value.items()}
        if isinstance(value, list):
            return [self.resolve(v) for v in value]
        return value

    def _resolve_string(self, value: str) -> Any:
        if "{{" not in value or "}}" not in value:
            return value

        try:
            match = _SINGLE_EXPRESSION.match(value)
            if match:
                evaluate = self.env.compile_expression(match.group("expr").strip(), undefined_to_none=False)
                result = evaluate(**self.variables)
                return "" if isinstance(result, Undefined) else result
            return self.env.from_string(value).render(**self.variables)
        except Exception as e:
            # The raw text is kept so one bad field doesn't fail the item
            logger.warning(f"Could not resolve expression '{value}': {e}")
            return value
