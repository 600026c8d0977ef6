"""Render a provisioning context as a Vagrantfile."""
import json
import logging
import re
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .constants import TEMPLATE_DIR, TEMPLATE_NAME
from .context import ProvisioningContext, Symbol
from .version import __version__

logger = logging.getLogger(__name__)

_RUBY_KEY = re.compile(r"^[a-z_][a-zA-Z0-9_]*$")


def ruby(value: Any) -> str:
    """Python value -> Ruby literal."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Symbol):
        return str(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        # json escapes quotes, backslashes and control chars the way Ruby
        # does, only interpolation is left. Non ASCII chars stay raw: Ruby
        # rejects the surrogate pairs json would write for them
        return json.dumps(value, ensure_ascii=False).replace("#", "\\#")
    if isinstance(value, Mapping):
        return "{ %s }" % ", ".join(
            f"{ruby_key(k)} {ruby(v)}" for k, v in value.items()
        )
    if isinstance(value, (list, tuple, set)):
        return "[%s]" % ", ".join(ruby(v) for v in value)
    raise TypeError(f"{type(value)} can't be converted to Ruby")


def ruby_key(key: Any) -> str:
    """Hash key or keyword argument (``key:`` or ``"key" =>``)."""
    key = str(key)
    if _RUBY_KEY.match(key):
        return f"{key}:"
    return f"{ruby(key)} =>"


def ruby_kwargs(options: Mapping) -> str:
    return "".join(f", {ruby_key(k)} {ruby(v)}" for k, v in options.items())


def _environment() -> Environment:
    loader = FileSystemLoader(searchpath=TEMPLATE_DIR)
    env = Environment(
        loader=loader,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["ruby"] = ruby
    env.filters["ruby_kwargs"] = ruby_kwargs
    return env


def render(context: ProvisioningContext) -> str:
    template = _environment().get_template(TEMPLATE_NAME)
    return template.render(context=context, vm=context.vm, version=__version__)


def write(context: ProvisioningContext, path: str) -> str:
    vagrantfile = render(context)
    with open(path, "w", encoding="utf-8") as f:
        f.write(vagrantfile)
    logger.info("Vagrantfile written in %s", path)
    return path
