"""Provide insights about Python objects."""

import inspect
from typing import Any


def get_qualname(obj: Any) -> str:
    """Get the qualified name of the given object.

    Used to describe which compute function an expression
    invokes when printing a query plan.

    For functions or methods, this will return
    something like `module.class.method` or
    `module.function`.

    >>> import pyarrow.compute as pc
    >>> get_qualname(pc.add)
    'pyarrow.compute.add'
    """
    module = inspect.getmodule(obj)
    module_name = module.__name__ if module is not None else "<unknown>"
    if inspect.ismethod(obj):
        return f"{module_name}.{obj.__self__.__class__.__name__}.{obj.__name__}"
    elif inspect.isfunction(obj) or inspect.isbuiltin(obj):
        return f"{module_name}.{obj.__qualname__}"
    elif inspect.isclass(obj):
        return f"{module_name}.{obj.__name__}"
    elif inspect.ismodule(obj):
        return obj.__name__
    return f"{module_name}.{obj.__class__.__name__}"
