"""
Loader configuration.
"""

from __future__ import annotations

import os
import typing as t

from pydantic import BaseModel, ConfigDict, Field

# Integer/MAX_VALUE: large enough to never close a batch by size.
UNBOUNDED_BATCH_SIZE = 2**31 - 1

ENV_PREFIX = "TAKO_"


class LoaderOptions(BaseModel):
    """
    Bounds and knobs for a single loader.

    Parameters
    ----------
    max_batch_size : int
        Maximum number of keys passed to one ``fetch_fn`` call.
        Set to ``1`` to disable batching.
    max_batch_time_ms : float
        Maximum time, in milliseconds, a non-empty batch waits before dispatch.
    buffer_size : int
        Capacity of the input buffer between callers and the collector.
    max_pending_puts : int
        Maximum number of callers allowed to block on a full input buffer
        before ``BufferOverflowError`` is raised.
    name : str
        Loader name, used for thread names and log context.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_batch_size: int = Field(default=UNBOUNDED_BATCH_SIZE, ge=1)
    max_batch_time_ms: float = Field(default=5, ge=0)
    buffer_size: int = Field(default=10000, ge=1)
    max_pending_puts: int = Field(default=1024, ge=1)
    name: str = Field(default="tako", min_length=1)

    @property
    def max_batch_time_seconds(self) -> float:
        return self.max_batch_time_ms / 1000.0

    @classmethod
    def from_env(cls, **overrides: t.Any) -> "LoaderOptions":
        """
        Build options from ``TAKO_*`` environment variables.

        Parameters
        ----------
        **overrides : typing.Any
            Values that take precedence over the environment.

        Returns
        -------
        LoaderOptions
            Validated options; unset variables fall back to defaults.
        """
        values: dict[str, t.Any] = {}
        for field_name in ("max_batch_size", "max_batch_time_ms", "buffer_size", "max_pending_puts"):
            raw = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
            if raw:
                values[field_name] = raw
        values.update(overrides)
        return cls.model_validate(obj=values)


def resolve_options(
    *,
    options: LoaderOptions | t.Mapping[str, t.Any] | None = None,
    **overrides: t.Any,
) -> LoaderOptions:
    """
    Merge user-supplied options and keyword overrides into ``LoaderOptions``.

    Parameters
    ----------
    options : LoaderOptions | Mapping[str, typing.Any] | None, optional
        Base options.
    **overrides : typing.Any
        Individual fields overriding ``options``.

    Returns
    -------
    LoaderOptions
        Validated options.
    """
    if options is None:
        base: dict[str, t.Any] = {}
    elif isinstance(options, LoaderOptions):
        if not overrides:
            return options
        base = options.model_dump()
    else:
        base = dict(options)
    base.update(overrides)
    return LoaderOptions.model_validate(obj=base)
