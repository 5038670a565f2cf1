"""
Submission of transaction plans.

Signs a plan's calldata and sends it once. There is no retry and no receipt
polling: confirmation and failure reporting belong to the caller, and the
plan's deadline is the only cancellation mechanism (enforced on chain).
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.types import TxParams, Wei

from coinchan.exceptions import (
    ExecutionError,
    describe_wallet_error,
    is_user_rejection_error,
)
from coinchan.utils import get_current_timestamp, get_logger, timestamp_to_iso

from .types import TransactionPlan

logger = get_logger(__name__)


@dataclass
class ExecutionConfig:
    """
    Configuration for plan submission.

    Attributes:
        private_key: Private key for signing transactions (WARNING: keep secure!)
        max_gas_price_gwei: Maximum gas price willing to pay
        gas_limit: Gas limit for a single plan
        dry_run_mode: If True, log the plan but don't submit it
        chain_id: Chain the plan must be sent on (None skips the check)
    """

    private_key: Optional[str] = None
    max_gas_price_gwei: float = 30.0
    gas_limit: int = 400_000
    dry_run_mode: bool = True
    chain_id: Optional[int] = None

    @classmethod
    def from_config(cls, config) -> "ExecutionConfig":
        """Build from a loaded ZammConfig (key read from its env var)."""
        return cls(
            private_key=config.private_key,
            dry_run_mode=config.dry_run,
            chain_id=config.chain_id,
        )


@dataclass
class ExecutionResult:
    """
    Result of a submission attempt.

    Attributes:
        success: Whether the transaction was handed to the network
        tx_hash: Transaction hash (if submitted)
        rejected: True if the signer declined the request
        execution_time_ms: Time spent building and sending
        error: User-facing error message (if failed)
    """

    success: bool
    tx_hash: Optional[str] = None
    rejected: bool = False
    execution_time_ms: Optional[float] = None
    error: Optional[str] = None


class BatchExecutor:
    """
    Sends transaction plans to the chain, one attempt each.
    """

    def __init__(
        self,
        web3: Web3,
        config: ExecutionConfig,
        clock: Callable[[], float] = get_current_timestamp,
    ):
        """
        Initialize executor.

        Args:
            web3: Web3 instance
            config: Execution configuration
            clock: Source of the current Unix time, for deadline checks
        """
        self.web3 = web3
        self.config = config
        self._clock = clock

        self.account: Optional[LocalAccount] = None
        if config.private_key:
            try:
                self.account = Account.from_key(config.private_key)
                logger.info(f"Loaded account: {self.account.address}")
            except Exception as e:
                logger.error(f"Failed to load private key: {e}")
                raise

        # Submission statistics
        self.submissions_attempted = 0
        self.submissions_sent = 0
        self.submissions_rejected = 0

    async def submit_batch(self, plan: TransactionPlan) -> ExecutionResult:
        """
        Submit a plan as a single transaction.

        Args:
            plan: Plan from TransactionPlanner

        Returns:
            ExecutionResult; failures are reported, not raised
        """
        start_time = time.time()
        self.submissions_attempted += 1

        if plan.deadline <= int(self._clock()):
            reason = f"Plan expired at {plan.deadline}"
            logger.warning(f"Submission blocked: {reason}")
            return ExecutionResult(success=False, error=reason)

        if self.config.dry_run_mode:
            logger.info(
                f"[DRY RUN] Would submit {plan.description or 'plan'}: "
                f"{len(plan)} call(s) to {plan.target}, value={plan.value}, "
                f"deadline={timestamp_to_iso(plan.deadline)}"
            )
            return ExecutionResult(
                success=True,
                tx_hash="0xDRYRUN",
                execution_time_ms=(time.time() - start_time) * 1000,
            )

        if not self.account:
            reason = "No account loaded (missing private key)"
            logger.warning(f"Submission blocked: {reason}")
            return ExecutionResult(success=False, error=reason)

        try:
            tx_params = self.build_transaction(plan)
            signed_tx = self.account.sign_transaction(tx_params)
            tx_hash = self.web3.to_hex(
                self.web3.eth.send_raw_transaction(signed_tx.raw_transaction)
            )
            self.submissions_sent += 1
            execution_time_ms = (time.time() - start_time) * 1000
            logger.info(
                f"Submitted {plan.description or 'plan'}: {tx_hash} "
                f"({execution_time_ms:.0f}ms)"
            )
            return ExecutionResult(
                success=True, tx_hash=tx_hash, execution_time_ms=execution_time_ms
            )

        except Exception as e:
            execution_time_ms = (time.time() - start_time) * 1000
            if is_user_rejection_error(e):
                self.submissions_rejected += 1
                logger.info("Signer rejected the transaction request")
                return ExecutionResult(
                    success=False, rejected=True, execution_time_ms=execution_time_ms
                )
            logger.error(f"Submission failed after {execution_time_ms:.0f}ms: {e}")
            if isinstance(e, ExecutionError):
                error = str(e)
            else:
                error = describe_wallet_error(e)
            return ExecutionResult(
                success=False,
                error=error,
                execution_time_ms=execution_time_ms,
            )

    def build_transaction(self, plan: TransactionPlan) -> TxParams:
        """
        Build unsigned transaction parameters for a plan.

        Args:
            plan: Plan to encode

        Returns:
            Transaction parameters

        Raises:
            ExecutionError: If the node is on a different chain than configured
        """
        chain_id = self.web3.eth.chain_id
        if self.config.chain_id is not None and chain_id != self.config.chain_id:
            raise ExecutionError(
                f"Connected to chain {chain_id}, expected {self.config.chain_id}",
                details={"chain_id": chain_id, "expected": self.config.chain_id},
            )

        tx: TxParams = {
            "from": self.account.address,
            "to": plan.target,
            "value": Wei(plan.value),
            "gas": self.config.gas_limit,
            "gasPrice": self._get_gas_price(),
            "nonce": self.web3.eth.get_transaction_count(self.account.address),
            "chainId": chain_id,
            "data": plan.encode(),
        }
        return tx

    def _get_gas_price(self) -> Wei:
        """Get current gas price with ceiling."""
        current_gas_price = self.web3.eth.gas_price
        max_gas_price = Web3.to_wei(self.config.max_gas_price_gwei, "gwei")

        gas_price = min(current_gas_price, max_gas_price)

        logger.debug(
            f"Gas price: {Web3.from_wei(gas_price, 'gwei'):.2f} gwei "
            f"(current: {Web3.from_wei(current_gas_price, 'gwei'):.2f})"
        )

        return gas_price

    def get_stats(self) -> Dict:
        """Get submission statistics."""
        return {
            "submissions_attempted": self.submissions_attempted,
            "submissions_sent": self.submissions_sent,
            "submissions_rejected": self.submissions_rejected,
        }
