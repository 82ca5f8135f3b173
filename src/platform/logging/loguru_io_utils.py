from inspect import FullArgSpec, getfile, getfullargspec, getsourcelines
from os.path import basename
import re
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_config import (
    SENSITIVE_KEYWORDS,
    TRUNCATE_LENGTH,
    call_depth_var,
    chain_start_time_var,
)


MASK = '********'

# `password='abc'` inside a repr()
_SENSITIVE_REPR_PATTERN = re.compile(
    r"(^|\W)(" + '|'.join(sorted(SENSITIVE_KEYWORDS)) + r")='[^']*'(\W|$)"
)


def get_chain_start_time() -> float:
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    try:
        lineno = getsourcelines(func)[1]
    except (OSError, TypeError):
        lineno = 0
    return f'{basename(getfile(getattr(func, "__func__", func)))}::{func.__qualname__}:{lineno}'


def reset_call_depth() -> None:
    layer = call_depth_var.get() - 1
    call_depth_var.set(layer)
    if not layer:
        chain_start_time_var.set(0)


def normalize_args_kwargs(
    func: Callable[..., Any], *args: Any, **kwargs: Any
) -> tuple[tuple[Any, ...], dict[Any, Any]]:
    if hasattr(func, '__wrapped__'):
        func = func.__wrapped__  # type: ignore
    full_arg_spec: FullArgSpec = getfullargspec(func)
    spec_args: list[str] = full_arg_spec.args

    if not full_arg_spec.varkw:
        kw_list: list[str] = spec_args + full_arg_spec.kwonlyargs
        kwargs = {k: v for k, v in kwargs.items() if k in kw_list}

    if not full_arg_spec.varargs:
        spec_default: list[Any] = list(full_arg_spec.defaults) if full_arg_spec.defaults else []
        args_dict = dict(
            zip(
                spec_args,
                [None] * (len(spec_args) - len(spec_default)) + spec_default,
                strict=False,
            )
        )
        if args_dict := {k: v for k, v in args_dict.items() if k not in kwargs}:
            if len(args) > len(args_dict):
                args = args[: len(args_dict)]
        else:
            args = ()

    return args, kwargs


def mask_sensitive(data: Any) -> Any:
    if isinstance(data, (str, bytes, int, float, bool)) or data is None:
        return data
    try:
        text = repr(data)
    except Exception:
        return data
    masked = _SENSITIVE_REPR_PATTERN.sub(rf"\1\2='{MASK}'\3", text)
    return data if masked == text else masked


def should_mask_keyword(keyword: Any, value: Any) -> Any:
    return MASK if keyword in SENSITIVE_KEYWORDS and value else value


def truncate_content(data: Any, max_length: int = TRUNCATE_LENGTH) -> Any:
    if isinstance(data, bytes):
        return f'<{len(data)} bytes>'
    if isinstance(data, str) and len(data) > max_length:
        return f'{data[:max_length]}...(+{len(data) - max_length} chars)'
    return data
