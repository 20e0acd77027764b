"""Typed admin requests parsed from a flat parameter bag.

The admin page posts these form fields:

  ``post_id``  draft identifier
  ``expires``  duration value (positive integer)
  ``measure``  duration unit (``second``/``minute``/``hour``/``day`` or
               the single-letter codes ``s``/``m``/``h``/``d``)
  ``_nonce``   action token for the submitted operation

``from_params`` is the single validation step: it either returns a fully
typed request or raises ``GrantError`` with the matching code.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .durations import duration_to_seconds, normalize_unit, parse_duration_value
from .errors import GrantError, GrantErrorCode

PARAM_DRAFT_ID = 'post_id'
PARAM_DURATION_VALUE = 'expires'
PARAM_DURATION_UNIT = 'measure'
PARAM_TOKEN = '_nonce'


def _require(params: Mapping[str, Any], *names: str) -> dict[str, Any]:
    """Return the named params, raising ``missing_parameter`` if any is absent or blank."""
    values: dict[str, Any] = {}
    missing = []
    for name in names:
        value = params.get(name)
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == '':
            missing.append(name)
        else:
            values[name] = value
    if missing:
        raise GrantError(
            GrantErrorCode.MISSING_PARAMETER,
            f'missing parameters: {", ".join(missing)}',
        )
    return values


class _GrantRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    draft_id: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1, repr=False)


class RevokeGrantRequest(_GrantRequest):
    """Stop sharing a draft."""

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> RevokeGrantRequest:
        values = _require(params, PARAM_DRAFT_ID, PARAM_TOKEN)
        return cls(
            draft_id=str(values[PARAM_DRAFT_ID]),
            token=str(values[PARAM_TOKEN]),
        )


class _DurationRequest(_GrantRequest):
    duration_value: int = Field(..., gt=0)
    duration_unit: str

    @classmethod
    def from_params(cls, params: Mapping[str, Any]):
        values = _require(
            params,
            PARAM_DRAFT_ID,
            PARAM_DURATION_VALUE,
            PARAM_DURATION_UNIT,
            PARAM_TOKEN,
        )
        value = parse_duration_value(values[PARAM_DURATION_VALUE])
        unit = normalize_unit(values[PARAM_DURATION_UNIT])
        duration_to_seconds(value, unit)  # rejects over-long durations
        return cls(
            draft_id=str(values[PARAM_DRAFT_ID]),
            token=str(values[PARAM_TOKEN]),
            duration_value=value,
            duration_unit=unit,
        )


class CreateGrantRequest(_DurationRequest):
    """Share a draft for ``duration_value`` × ``duration_unit``."""


class ExtendGrantRequest(_DurationRequest):
    """Push an existing grant's expiry back by ``duration_value`` × ``duration_unit``."""
