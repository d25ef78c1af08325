"""Read trip, payment and alias JSON files into domain records.

Schema problems are reported as the domain ``ValidationError`` so callers never
see pydantic exceptions.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tripmatch.config.matching import MatchingConfig
from tripmatch.domain.errors import ValidationError

from .schema import AliasFile, PaymentFile, TripPayload
from .translator import translate_alias, translate_payment, translate_trip

if TYPE_CHECKING:
    from pathlib import Path

    from tripmatch.domain.model import AliasEntry, PaymentRecord, TripRecord

log = getLogger(__name__)


def _read(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc


def _validate[TModel: BaseModel](model: type[TModel], document: Any, source: str) -> TModel:
    try:
        return model.model_validate(document)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(f"{source}: {problems}") from exc


def parse_trip(document: Any, *, source: str = "<trip>") -> TripRecord:
    return translate_trip(_validate(TripPayload, document, source))


def parse_payments(document: Any, *, source: str = "<payments>") -> list[PaymentRecord]:
    if isinstance(document, list):
        document = {"payments": document}
    payload = _validate(PaymentFile, document, source)
    return [translate_payment(item) for item in payload.payments]


def parse_aliases(
    document: Any, config: MatchingConfig | None = None, *, source: str = "<aliases>"
) -> list[AliasEntry]:
    cfg = config or MatchingConfig()
    if isinstance(document, list):
        document = {"aliases": document}
    payload = _validate(AliasFile, document, source)
    return [translate_alias(item, cfg) for item in payload.aliases]


def load_trip(path: Path) -> TripRecord:
    return parse_trip(_read(path), source=str(path))


def load_payments(path: Path) -> list[PaymentRecord]:
    payments = parse_payments(_read(path), source=str(path))
    log.debug("Loaded %d payment(s) from %s", len(payments), path)
    return payments


def load_aliases(path: Path, config: MatchingConfig | None = None) -> list[AliasEntry]:
    aliases = parse_aliases(_read(path), config, source=str(path))
    log.debug("Loaded %d alias(es) from %s", len(aliases), path)
    return aliases
