"""Render scenario payload templates into concrete request bodies.

Templates carry ``{{token}}`` placeholders. The iteration number and the
two timestamps follow from the inputs; every other token is drawn fresh
from the process-wide random source on each call, so successive payloads
for the same configuration differ.

Supported tokens:

* ``iteration``, ``timestamp``, ``iso_timestamp``
* ``random``, ``random_amount``, ``random_cnic``, ``random_account``, ``random_iban``
* ``user_profile``, ``user_activity``, ``from_name``, ``to_name``,
  ``transaction_comments``, ``activity_code``, ``user_type``, ``to_bank``,
  ``transaction_datetime``, ``user_id``
* ``amount_risk_score``, ``amount_z_score``, ``high_amount_flag``,
  ``new_activity_code``, ``new_from_account``, ``new_to_account``,
  ``new_to_city``, ``outside_usual_day``
* ``watchlist_from_account``, ``watchlist_from_name``, ``watchlist_to_account``,
  ``watchlist_to_name``, ``watchlist_to_bank``, ``watchlist_ip_address``

Unknown tokens and any other text pass through unchanged.
"""

import datetime
import random
import re
from collections.abc import Callable, Sequence

from replayer.core import scenario_pools as pools

__all__ = ["TOKENS", "render"]

_TOKEN_RE = re.compile(r"\{\{(\w+)\}\}")
_RANDOM = random.Random()

# Probability of "Yes" for each risk-context flag.
RISK_FLAG_PROBABILITIES = {
    "high_amount_flag": 0.4,
    "new_activity_code": 0.4,
    "new_from_account": 0.3,
    "new_to_account": 0.4,
    "new_to_city": 0.3,
    "outside_usual_day": 0.3,
}
WATCHLIST_PROBABILITY = 0.2
WATCHLIST_FLAGS = (
    "watchlist_from_account",
    "watchlist_from_name",
    "watchlist_to_account",
    "watchlist_to_name",
    "watchlist_to_bank",
    "watchlist_ip_address",
)

Generator = Callable[[random.Random, datetime.datetime, int], str]


def _pick(pool: Sequence[str]) -> Generator:
    return lambda rng, _now, _iteration: rng.choice(pool)


def _yes_no(probability: float) -> Generator:
    return lambda rng, _now, _iteration: "Yes" if rng.random() < probability else "No"


def _timestamp(now: datetime.datetime) -> str:
    # e.g. 3/7/2025 02:05:09 PM
    return f"{now.month}/{now.day}/{now.year} {now:%I:%M:%S %p}"


def _iso_timestamp(now: datetime.datetime) -> str:
    # seven fractional digits, trailing Z
    return f"{now:%Y-%m-%dT%H:%M:%S}.{now.microsecond:06d}0Z"


def _random_iban(rng: random.Random) -> str:
    bank_code = rng.choice(pools.IBAN_BANK_CODES)
    return f"PK{rng.randrange(10, 99)}{bank_code}00{rng.randrange(100000000000000, 999999999999999)}"


def _transaction_datetime(rng: random.Random, now: datetime.datetime) -> str:
    moment = now - datetime.timedelta(
        days=rng.randrange(0, 30),
        hours=rng.randrange(0, 24),
        minutes=rng.randrange(0, 60),
        seconds=rng.randrange(0, 60),
    )
    return f"{moment:%d/%m/%Y, %H:%M:%S}"


TOKENS: dict[str, Generator] = {
    "iteration": lambda _rng, _now, iteration: str(iteration),
    "timestamp": lambda _rng, now, _iteration: _timestamp(now),
    "iso_timestamp": lambda _rng, now, _iteration: _iso_timestamp(now),
    "random": lambda rng, _now, _iteration: str(rng.randrange(1000, 9999)),
    "random_amount": lambda rng, _now, _iteration: str(rng.randrange(10000, 999999)),
    "random_cnic": lambda rng, _now, _iteration: f"CN4210{rng.randrange(100000000, 999999999)}",
    "random_account": lambda rng, _now, _iteration: f"1063{rng.randrange(100000000, 999999999)}",
    "random_iban": lambda rng, _now, _iteration: _random_iban(rng),
    "user_profile": _pick(pools.USER_PROFILES),
    "user_activity": _pick(pools.USER_ACTIVITIES),
    "from_name": _pick(pools.SENDER_NAMES),
    "to_name": _pick(pools.RECEIVER_NAMES),
    "transaction_comments": _pick(pools.TRANSACTION_COMMENTS),
    "activity_code": _pick(pools.ACTIVITY_CODES),
    "user_type": _pick(pools.USER_TYPES),
    "to_bank": _pick(pools.BANKS),
    "transaction_datetime": lambda rng, now, _iteration: _transaction_datetime(rng, now),
    "user_id": lambda rng, _now, _iteration: (
        f"{rng.choice(pools.USER_ID_PREFIXES)}{rng.randrange(100, 99999)}"
    ),
    "amount_risk_score": lambda rng, _now, _iteration: str(rng.randrange(1, 11)),
    "amount_z_score": lambda rng, _now, _iteration: f"{round(rng.random() * 6.0, 1):.1f}",
    **{name: _yes_no(p) for name, p in RISK_FLAG_PROBABILITIES.items()},
    **{name: _yes_no(WATCHLIST_PROBABILITY) for name in WATCHLIST_FLAGS},
}


def render(
    template: str,
    iteration: int,
    *,
    rng: random.Random | None = None,
    now: datetime.datetime | None = None,
) -> str:
    """Substitute every known ``{{token}}`` in ``template``.

    Each token is evaluated at most once per call, so repeated
    occurrences of the same token within one template share a value.

    Args:
        template: Request body template.
        iteration: 1-based iteration number of the attempt.
        rng: Random source; defaults to the process-wide one.
        now: Current UTC time; defaults to the wall clock.

    Returns:
        The rendered payload.
    """
    rng = rng or _RANDOM
    now = now or datetime.datetime.now(datetime.UTC)
    values: dict[str, str] = {}

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        generator = TOKENS.get(name)
        if generator is None:
            return match.group(0)
        if name not in values:
            values[name] = generator(rng, now, iteration)
        return values[name]

    return _TOKEN_RE.sub(substitute, template)
