from __future__ import annotations

import importlib
import importlib.util
import types

# module name -> basketrules extra that installs it
_EXTRAS = {
    "polars": "polars",
    "pyarrow": "pyarrow",
}


def import_optional_dependency(name: str, extra: str = "") -> types.ModuleType:
    """Import an optional dependency or raise an ``ImportError`` naming the extra to install.

    Parameters
    ----------
    name : str
        The module name.
    extra : str
        Additional text appended to the error message.
    """
    package_name = name.split(".")[0]
    if importlib.util.find_spec(package_name) is None:
        if package_name in _EXTRAS:
            hint = f"pip install 'basketrules[{_EXTRAS[package_name]}]'"
        else:
            hint = f"pip install {package_name}"
        msg = f"Missing optional dependency '{package_name}'. Install it with `{hint}`."
        if extra:
            msg += f" {extra}"
        raise ImportError(msg)
    return importlib.import_module(name)
