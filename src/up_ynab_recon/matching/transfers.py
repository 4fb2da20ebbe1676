"""
Transfer reconciliation.

Up reports a transfer as two unrelated transactions, one per account, with no
reference between them. The legs are paired by equal magnitude, a small time
window and matching message prefixes.
"""

from datetime import timedelta
from typing import Optional, Sequence
import logging

from ..config import TransferConfig
from ..models.money import Money
from ..models.transaction import Transaction, TransferMatches, TransferPair
from ..utils.exceptions import ReconciliationInvariantViolation
from .strategies import PairingRule, PrefixFamilyRule, RoundUpRule

logger = logging.getLogger(__name__)


class TransferMatcher:
    """
    Pairs the two legs of internal transfers.

    Within an amount group each rule makes a full pass over the live
    (outgoing, incoming) pairs before the next rule runs, so a fallback rule
    only sees legs the earlier rules left unpaired.
    """

    def __init__(self, config: Optional[TransferConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Transfer settings (defaults if omitted)
        """
        self.config = config or TransferConfig()
        self.window = timedelta(seconds=self.config.window_seconds)
        self.rules = self._build_rules()

    def _build_rules(self) -> list[PairingRule]:
        families = self.config.prefix_families
        return [
            PrefixFamilyRule(families),
            RoundUpRule(families, self.config.round_up_message),
        ]

    def match(self, candidates: Sequence[Transaction]) -> TransferMatches:
        """
        Pair up transfer legs.

        Args:
            candidates: Internal transactions from one ledger

        Returns:
            Matched pairs and the legs left over

        Raises:
            ReconciliationInvariantViolation: If a leg was lost or used twice
        """
        result = TransferMatches()

        for amount, group in self._group_by_magnitude(candidates).items():
            pairs, remainder = self._match_group(group)
            logger.debug(
                f"Amount group {amount}: {len(pairs)} pairs, {len(remainder)} unmatched"
            )
            result.matched.extend(pairs)
            result.unmatched.extend(remainder)

        if result.total != len(candidates):
            raise ReconciliationInvariantViolation(
                f"expected {len(candidates)} total, found {len(result.matched) * 2} "
                f"matched and {len(result.unmatched)} unmatched"
            )

        logger.info(
            f"Matched {len(result.matched)} transfer pairs, "
            f"{len(result.unmatched)} transfer legs unmatched"
        )
        return result

    @staticmethod
    def _group_by_magnitude(
        candidates: Sequence[Transaction],
    ) -> dict[Money, list[Transaction]]:
        groups: dict[Money, list[Transaction]] = {}
        for transaction in candidates:
            groups.setdefault(abs(transaction.amount), []).append(transaction)
        return groups

    def _match_group(
        self, group: list[Transaction]
    ) -> tuple[list[TransferPair], list[Transaction]]:
        # None marks a consumed leg
        tos: list[Optional[Transaction]] = [t for t in group if t.amount.is_negative()]
        froms: list[Optional[Transaction]] = [
            t for t in group if not t.amount.is_negative()
        ]
        pairs: list[TransferPair] = []

        for rule in self.rules:
            pairs.extend(self._apply_rule(rule, tos, froms))

        remainder = [t for t in tos if t is not None] + [t for t in froms if t is not None]
        return pairs, remainder

    def _apply_rule(
        self,
        rule: PairingRule,
        tos: list[Optional[Transaction]],
        froms: list[Optional[Transaction]],
    ) -> list[TransferPair]:
        """Pair every live leg the rule accepts, consuming both legs in place."""
        pairs: list[TransferPair] = []
        for i, to in enumerate(tos):
            if to is None:
                continue
            for j, from_ in enumerate(froms):
                if from_ is None:
                    continue
                if abs(from_.time - to.time) > self.window:
                    continue

                pair = rule.try_pair(to, from_)
                if pair is not None:
                    logger.debug(f"Paired {to.id} -> {from_.id} by {rule.name}")
                    pairs.append(pair)
                    tos[i] = None
                    froms[j] = None
                    break
        return pairs


def match_transfers(
    candidates: Sequence[Transaction], config: Optional[TransferConfig] = None
) -> TransferMatches:
    """Pair transfer legs with a one-off ``TransferMatcher``."""
    return TransferMatcher(config).match(candidates)
