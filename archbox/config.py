"""
Manage a configuration for archbox.
"""
import copy
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .constants import VAGRANTFILE

logger = logging.getLogger(__name__)

_config = dict(
    plugins=None,
    vagrantfile=VAGRANTFILE,
    quiet_stdout=False,
    quiet_stderr=False,
)


def get_config() -> Dict:
    """Get (a copy of) the current config."""
    return copy.deepcopy(_config)


def _set(key: str, value: Optional[Any]):
    if value is not None:
        _config[key] = value


def set_config(
    plugins: Optional[List[str]] = None,
    vagrantfile: Optional[str] = None,
    quiet_stdout: Optional[bool] = None,
    quiet_stderr: Optional[bool] = None,
):
    """Set a specific config value.

    Args:
        plugins: names of the Vagrant plugins installed on the host.
            None: detect them by asking Vagrant (``vagrant plugin list``)
        vagrantfile: name of the file the provider writes in its root
            directory
        quiet_stdout: silence Vagrant's standard output
        quiet_stderr: silence Vagrant's standard error
    """
    _set("plugins", plugins)
    _set("vagrantfile", vagrantfile)
    _set("quiet_stdout", quiet_stdout)
    _set("quiet_stderr", quiet_stderr)

    logger.debug("config = %s", get_config())


@contextmanager
def config_context(**new_config):
    """A context manager to manage a config specific to a portion of code.

    The original config is restored when exiting the context manager.

    Args:
        new_config: any keyword argument supported by
            :py:func:`~archbox.config.set_config`

    Examples:

        .. code-block:: python

            from archbox.config import config_context

            ...
            with config_context(plugins=["vagrant-bindfs"]):
                # skip plugin detection
                ...

            # the config goes back to its previous state here
    """
    old_config = get_config()
    set_config(**new_config)
    try:
        yield
    finally:
        # plugins=None is ignored by set_config
        _config.clear()
        _config.update(old_config)
