"""
TipStake Staking Engine

Public entry point of the staking subsystem. Each operation is one atomic
call: it reads the state store, rolls reward accrual forward, validates every
precondition and stages its writes. The external asset transfer runs last,
immediately before the commit; a failed commit reverses the transfer. Any
exception discards the whole call.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from ..config import EngineConfig, StakingParams
from ..constants import MAX_TICK, NATIVE_ASSET_ID
from ..logger import get_logger
from ..metrics import StakingMetrics
from ..state import DataKey, MemoryStateStore, SQLiteStateStore, StateStore, StoreTransaction
from .arithmetic import checked_add, checked_sub, saturating_sub
from .assets import AssetRegistry, AssetTransfer
from .boost import BoostCalculator
from .clock import Clock
from .cooldown import CooldownQueue
from .events import EventLog, StakingEvent, StakingEventType
from .rewards import RewardsCalculator
from .slashing import SlashingController
from .types import (
    AccountSlashedError,
    AlreadyInitializedError,
    BelowMinimumError,
    InsufficientStakeError,
    InvalidAmountError,
    NoStakeError,
    NoUnstakeRequestError,
    NotInitializedError,
    StakeAccount,
    StakingError,
    UnauthorizedError,
    UnstakeRequest,
)

logger = get_logger(__name__)


class StakingEngine:
    """
    Stake, reward, cooldown and slashing engine.

    Responsibilities:
    - Lock value and track per-account principal
    - Accrue time-proportional rewards and pay them out on claim
    - Queue unstaked value behind a cooldown
    - Slash and restore accounts (admin only)
    - Maintain the aggregate staked total

    Calls are serialized through an asyncio.Lock; the engine never yields to
    another operation between reading and committing state.
    """

    def __init__(
        self,
        store: StateStore,
        assets: AssetRegistry,
        clock: Clock,
        params: StakingParams = None,
        custody_address: str = "tipstake-custody",
        metrics: Optional[StakingMetrics] = None,
        default_asset_id: str = NATIVE_ASSET_ID,
    ):
        """
        Initialize staking engine.

        Args:
            store: Keyed persistent state
            assets: Transfer backends by asset identifier
            clock: Host tick source
            params: Staking parameters (defaults reproduce the deployed engine)
            custody_address: Account that holds staked value and the reward reserve
            metrics: Optional metrics collector
            default_asset_id: Asset used when initialize() is given none
        """
        self.store = store
        self.assets = assets
        self.clock = clock
        self.params = params or StakingParams()
        self.params.validate()
        self.custody_address = custody_address
        self.metrics = metrics
        self.default_asset_id = default_asset_id

        self.rewards = RewardsCalculator(self.params)
        self.boosts = BoostCalculator(self.params)
        self.cooldown = CooldownQueue(self.params)
        self.slashing = SlashingController(self.params)

        self.events = EventLog()
        self._lock = asyncio.Lock()

    @classmethod
    async def create(
        cls,
        config: EngineConfig,
        assets: AssetRegistry,
        clock: Clock,
        metrics: Optional[StakingMetrics] = None,
    ) -> "StakingEngine":
        """Build an engine and its store from configuration."""
        config.validate()
        if config.store.backend == "sqlite":
            store = await SQLiteStateStore.create(config.store.path)
        else:
            store = MemoryStateStore()
        return cls(
            store=store,
            assets=assets,
            clock=clock,
            params=config.staking,
            custody_address=config.custody_address,
            metrics=metrics,
            default_asset_id=config.asset_id,
        )

    async def close(self) -> None:
        await self.store.close()

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    async def initialize(self, admin: str, asset_id: str = None) -> None:
        """
        Set the admin and the staked asset. Callable once.

        Raises:
            AlreadyInitializedError: If an admin is already recorded
            AssetNotFoundError: If ``asset_id`` has no registered backend
        """
        asset_id = asset_id or self.default_asset_id
        async with self._operation("initialize"):
            now = self._now()
            async with self.store.transaction() as txn:
                if await txn.has(DataKey.ADMIN):
                    raise AlreadyInitializedError()
                self.assets.resolve(asset_id)

                txn.set(DataKey.ADMIN, admin)
                txn.set(DataKey.ASSET, asset_id)
                txn.set(DataKey.TOTAL_STAKED, 0)

            self._emit(StakingEventType.INITIALIZED, admin, 0, now, asset=asset_id)
            logger.info(f"Initialized: staking {asset_id} with admin {admin}")
            self._update_total_gauge(0)

    async def transfer_admin(self, caller: str, new_admin: str) -> None:
        """Hand the admin role to ``new_admin``."""
        if not new_admin:
            raise ValueError("new_admin cannot be empty")
        async with self._operation("transfer_admin"):
            now = self._now()
            async with self.store.transaction() as txn:
                await self._require_admin(txn, caller)
                txn.set(DataKey.ADMIN, new_admin)

            self._emit(StakingEventType.ADMIN_TRANSFERRED, new_admin, 0, now, previous=caller)
            logger.info(f"Admin transferred: {caller} → {new_admin}")

    # =========================================================================
    # STAKE LIFECYCLE
    # =========================================================================

    async def stake(self, account: str, amount: int) -> None:
        """
        Lock ``amount`` from ``account`` into custody.

        Raises:
            NotInitializedError: Before initialize()
            AccountSlashedError: If the account is slashed
            BelowMinimumError: If ``amount`` is below the minimum stake
            StakingOverflowError: If principal or total leave the 128-bit range
            TransferFailedError: If the account cannot fund the stake
        """
        async with self._operation("stake"):
            now = self._now()
            async with self.store.transaction() as txn:
                await self._require_initialized(txn)
                if await self._slashed(txn, account):
                    raise AccountSlashedError(account)
                if amount < self.params.min_stake:
                    raise BelowMinimumError(amount, self.params.min_stake)

                info = await self._load_stake(txn, account) or StakeAccount(since=now)
                info = self.rewards.roll_forward(info, now)
                info.principal = checked_add(info.principal, amount)
                total = checked_add(await self._total(txn), amount)

                txn.set(DataKey.stake(account), info.to_dict())
                txn.set(DataKey.TOTAL_STAKED, total)

                await self._settle(txn, account, self.custody_address, amount)

            self._emit(StakingEventType.STAKED, account, amount, now, principal=info.principal)
            logger.info(
                f"Staked: {account} locked {amount} units at tick {now} "
                f"(principal: {info.principal} units)"
            )
            self._update_total_gauge(total)

    async def unstake(self, account: str, amount: int) -> None:
        """
        Move ``amount`` of principal into the cooldown queue.

        Raises:
            NotInitializedError: Before initialize()
            InvalidAmountError: If ``amount`` is not positive
            NoStakeError: If the account never staked
            InsufficientStakeError: If ``amount`` exceeds the principal
            StakingOverflowError: If the queued amount leaves the 128-bit range
        """
        async with self._operation("unstake"):
            now = self._now()
            async with self.store.transaction() as txn:
                await self._require_initialized(txn)
                if amount <= 0:
                    raise InvalidAmountError(f"Unstake amount must be positive, got {amount}")

                info = await self._load_stake(txn, account)
                if info is None:
                    raise NoStakeError(account)
                if amount > info.principal:
                    raise InsufficientStakeError(amount, info.principal)

                slashed = await self._slashed(txn, account)
                info = self.rewards.roll_forward(info, now, accrue=not slashed)
                info.principal = checked_sub(info.principal, amount)

                request = self.cooldown.merge(
                    await self._load_unstake(txn, account), amount, now
                )
                total = saturating_sub(await self._total(txn), amount)

                txn.set(DataKey.stake(account), info.to_dict())
                txn.set(DataKey.unstake(account), request.to_dict())
                txn.set(DataKey.TOTAL_STAKED, total)

            self._emit(
                StakingEventType.UNSTAKED, account, amount, now,
                queued=request.amount, unlock_at=request.unlock_at,
            )
            logger.info(
                f"Unstaked: {account} queued {amount} units at tick {now} "
                f"({request.amount} units unlock at tick {request.unlock_at})"
            )
            self._update_total_gauge(total)

    async def withdraw(self, account: str) -> int:
        """
        Pay out the whole cooled-down unstake request.

        Returns:
            Amount transferred back to ``account``

        Raises:
            NotInitializedError: Before initialize()
            NoUnstakeRequestError: If nothing is queued
            CooldownNotMetError: If the unlock tick has not been reached
            TransferFailedError: If custody cannot cover the amount
        """
        async with self._operation("withdraw"):
            now = self._now()
            async with self.store.transaction() as txn:
                await self._require_initialized(txn)
                request = await self._load_unstake(txn, account)
                if request is None:
                    raise NoUnstakeRequestError(account)
                self.cooldown.require_unlocked(request, now)

                txn.delete(DataKey.unstake(account))

                await self._settle(txn, self.custody_address, account, request.amount)

            self._emit(StakingEventType.WITHDREW, account, request.amount, now)
            logger.info(f"Withdrew: {account} received {request.amount} units at tick {now}")
            return request.amount

    async def claim_rewards(self, account: str) -> int:
        """
        Pay out all pending rewards.

        Returns:
            Amount claimed, 0 when nothing has accrued

        Raises:
            NotInitializedError: Before initialize()
            AccountSlashedError: If the account is slashed
            NoStakeError: If the account never staked
            TransferFailedError: If the reward reserve cannot cover the claim
        """
        async with self._operation("claim_rewards"):
            now = self._now()
            async with self.store.transaction() as txn:
                await self._require_initialized(txn)
                if await self._slashed(txn, account):
                    raise AccountSlashedError(account)
                info = await self._load_stake(txn, account)
                if info is None:
                    raise NoStakeError(account)

                claimed = self.rewards.projected(info, now)
                if claimed == 0:
                    return 0

                info.pending_rewards = 0
                info.since = max(info.since, now)

                txn.set(DataKey.stake(account), info.to_dict())

                await self._settle(txn, self.custody_address, account, claimed)

            self._emit(StakingEventType.CLAIMED, account, claimed, now)
            logger.info(f"Claimed: {account} received {claimed} units of rewards at tick {now}")
            if self.metrics:
                self.metrics.rewards_claimed_total.inc(claimed)
            return claimed

    # =========================================================================
    # SLASHING
    # =========================================================================

    async def slash(self, caller: str, account: str) -> int:
        """
        Cut ``account``'s principal, forfeit its pending rewards and flag it.

        The cut is transferred from custody to the admin.

        Returns:
            Principal removed

        Raises:
            NotInitializedError: Before initialize()
            UnauthorizedError: If ``caller`` is not the admin
            NoStakeError: If the account never staked
        """
        async with self._operation("slash"):
            now = self._now()
            async with self.store.transaction() as txn:
                admin = await self._require_admin(txn, caller)
                info = await self._load_stake(txn, account)
                if info is None:
                    raise NoStakeError(account)

                slashed = await self._slashed(txn, account)
                info = self.rewards.roll_forward(info, now, accrue=not slashed)
                outcome = self.slashing.apply(info, now)
                total = saturating_sub(await self._total(txn), outcome.cut)

                txn.set(DataKey.stake(account), outcome.account.to_dict())
                txn.set(DataKey.slashed(account), True)
                txn.set(DataKey.TOTAL_STAKED, total)

                if outcome.cut > 0:
                    await self._settle(txn, self.custody_address, admin, outcome.cut)

            self._emit(
                StakingEventType.SLASHED, account, outcome.cut, now,
                forfeited_rewards=outcome.forfeited_rewards,
                principal=outcome.account.principal,
            )
            logger.warning(
                f"Slashed: {account} lost {outcome.cut} units and forfeited "
                f"{outcome.forfeited_rewards} units of rewards at tick {now}"
            )
            if self.metrics:
                self.metrics.slashed_total.inc(outcome.cut)
            self._update_total_gauge(total)
            return outcome.cut

    async def restore(self, caller: str, account: str) -> None:
        """
        Clear ``account``'s slash flag.

        Forfeited rewards and cut principal are not returned, and ticks spent
        slashed earn nothing: accrual restarts from the restore tick.
        """
        async with self._operation("restore"):
            now = self._now()
            async with self.store.transaction() as txn:
                await self._require_admin(txn, caller)
                info = await self._load_stake(txn, account)
                if info is not None and await self._slashed(txn, account):
                    info = self.rewards.roll_forward(info, now, accrue=False)
                    txn.set(DataKey.stake(account), info.to_dict())
                txn.set(DataKey.slashed(account), False)

            self._emit(StakingEventType.RESTORED, account, 0, now)
            logger.info(f"Restored: {account} may stake and claim again")

    # =========================================================================
    # VIEWS
    # =========================================================================

    async def get_stake(self, account: str) -> Optional[StakeAccount]:
        return await self._load_stake(self.store, account)

    async def get_unstake_request(self, account: str) -> Optional[UnstakeRequest]:
        return await self._load_unstake(self.store, account)

    async def total_staked(self) -> int:
        return await self._total(self.store)

    async def pending_rewards(self, account: str) -> int:
        """Stored pending rewards plus accrual up to the current tick."""
        info = await self._load_stake(self.store, account)
        if info is None:
            return 0
        if await self._slashed(self.store, account):
            return info.pending_rewards
        return self.rewards.projected(info, self._now())

    async def is_slashed(self, account: str) -> bool:
        return await self._slashed(self.store, account)

    async def calculate_boost(self, account: str) -> int:
        """Participation boost in percentage points, 0 if slashed or unstaked."""
        if await self._slashed(self.store, account):
            return 0
        info = await self._load_stake(self.store, account)
        if info is None:
            return 0
        return self.boosts.boost(info.principal)

    async def get_admin(self) -> Optional[str]:
        return await self.store.get(DataKey.ADMIN)

    async def get_asset_id(self) -> Optional[str]:
        return await self.store.get(DataKey.ASSET)

    def events_for(self, account: str) -> List[StakingEvent]:
        return self.events.filter(account=account)

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    @asynccontextmanager
    async def _operation(self, name: str):
        """Serialize one public call and record its outcome."""
        async with self._lock:
            try:
                yield
            except StakingError as e:
                logger.debug(f"{name} rejected: {e}")
                if self.metrics:
                    self.metrics.record_failure(name, e)
                raise
            if self.metrics:
                self.metrics.record_success(name)

    def _now(self) -> int:
        tick = self.clock.now()
        if tick < 0 or tick > MAX_TICK:
            raise ValueError(f"Tick {tick} out of range")
        return tick

    async def _require_initialized(self, reader: Any) -> None:
        if not await reader.has(DataKey.ADMIN):
            raise NotInitializedError()

    async def _require_admin(self, reader: Any, caller: str) -> str:
        admin = await reader.get(DataKey.ADMIN)
        if admin is None:
            raise NotInitializedError()
        if caller != admin:
            raise UnauthorizedError(caller)
        return admin

    async def _asset(self, reader: Any) -> AssetTransfer:
        asset_id = await reader.get(DataKey.ASSET)
        if asset_id is None:
            raise NotInitializedError()
        return self.assets.resolve(asset_id)

    async def _settle(
        self,
        txn: StoreTransaction,
        sender: str,
        recipient: str,
        amount: int,
    ) -> None:
        """
        Move ``amount`` and commit the staged writes as one step.

        The transfer runs last, after every check has passed. If the commit
        then fails, the transfer is reversed before the error propagates.
        """
        asset = await self._asset(txn)
        await asset.transfer(sender, recipient, amount)
        try:
            await txn.commit()
        except Exception as e:
            logger.error(
                f"State commit failed after moving {amount} units "
                f"{sender} → {recipient}, reversing transfer: {e}"
            )
            await asset.transfer(recipient, sender, amount)
            raise

    async def _load_stake(self, reader: Any, account: str) -> Optional[StakeAccount]:
        data = await reader.get(DataKey.stake(account))
        return StakeAccount.from_dict(data) if data is not None else None

    async def _load_unstake(self, reader: Any, account: str) -> Optional[UnstakeRequest]:
        data = await reader.get(DataKey.unstake(account))
        return UnstakeRequest.from_dict(data) if data is not None else None

    async def _slashed(self, reader: Any, account: str) -> bool:
        return bool(await reader.get(DataKey.slashed(account)))

    async def _total(self, reader: Any) -> int:
        return int(await reader.get(DataKey.TOTAL_STAKED) or 0)

    def _emit(
        self,
        kind: StakingEventType,
        account: str,
        amount: int,
        tick: int,
        **data: Any,
    ) -> None:
        self.events.append(
            StakingEvent(kind=kind, account=account, amount=amount, tick=tick, data=data)
        )

    def _update_total_gauge(self, total: int) -> None:
        if self.metrics:
            self.metrics.total_staked.set(total)
