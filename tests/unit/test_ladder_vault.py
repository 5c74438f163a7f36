"""
Тесты для LadderVault

Проверяет:
1. Первый mint: доли, MINIMUM_LIQUIDITY, несовпадение запрошенных долей
2. Последующие mint/burn: округление, slippage, лимит стоимости
3. Начисление management / performance fee
4. Размещение средств и ладдер (ACTIVE / PASSIVE / VAULT)
5. Swap через делегата: allowlist, slippage, повторный вход
6. Операции manager и контроль доступа
7. Журнал событий
"""

import pytest

from ladder_vault.adapters.in_memory import (
    FixedTickOracle,
    InMemoryLedger,
    InMemoryMarketMaker,
    LedgerError,
    OracleSwapDelegate,
)
from ladder_vault.core.config import VaultConfig
from ladder_vault.core.domain import (
    AccrueFeesEvent,
    BurnEvent,
    CannotWithdrawPoolAsset,
    DepositExceedsMaxTotal,
    FeeData,
    FeeTooHigh,
    FundsState,
    InitialMintSharesMismatch,
    InsufficientFunds,
    InsufficientShares,
    InvalidAmount,
    InvalidLadderParams,
    LadderParams,
    MintEvent,
    PositionUpdateEvent,
    QuoteAmountOverflow,
    ReentrantCall,
    SECONDS_PER_YEAR,
    SetFeeDataEvent,
    SetLadderPositionEvent,
    SlippageExceeded,
    SwapEvent,
    Unauthorized,
    UnauthorizedSwapDelegate,
    UpdateLastValueInQuoteEvent,
    ZeroAddress,
    ZeroAmount,
)
from ladder_vault.core.math.fixed_point import UINT256_MAX
from ladder_vault.vault import LadderVault

BASE, QUOTE, SHARES = "WETH", "USDC", "LV-WETH-USDC"
VAULT = "vault"
MANAGER = "manager"
TREASURY = "treasury"
MM = "market-maker"
SWAPPER = "swapper"
ALICE, BOB = "alice", "bob"

T0 = 1_700_000_000
QUOTE_SCALE = 10**12

ONE_WETH = 10**18
USDC = 10**6

FIRST_SHARES = 6_000 * USDC * QUOTE_SCALE - 1_000


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now


# =============================================================================
# FIXTURES
# =============================================================================


def fund_users(ledger: InMemoryLedger) -> InMemoryLedger:
    for user in (ALICE, BOB):
        ledger.mint(BASE, user, 10 * ONE_WETH)
        ledger.mint(QUOTE, user, 100_000 * USDC)
        ledger.approve(BASE, user, VAULT, UINT256_MAX)
        ledger.approve(QUOTE, user, VAULT, UINT256_MAX)
    return ledger


@pytest.fixture
def ledger():
    return fund_users(InMemoryLedger())


@pytest.fixture
def oracle():
    return FixedTickOracle(0)


@pytest.fixture
def market_maker(ledger):
    return InMemoryMarketMaker(MM, ledger, VAULT, BASE, QUOTE)


@pytest.fixture
def clock():
    return FakeClock()


def make_config(**overrides) -> VaultConfig:
    fields = dict(
        vault_address=VAULT,
        manager=MANAGER,
        base_asset=BASE,
        quote_asset=QUOTE,
        share_asset=SHARES,
        quote_offset_decimals=12,
        fee_data=FeeData(fee_recipient=TREASURY),
    )
    fields.update(overrides)
    return VaultConfig(**fields)


@pytest.fixture
def make_vault(ledger, oracle, market_maker, clock):
    def factory(**overrides) -> LadderVault:
        return LadderVault(make_config(**overrides), ledger, oracle, market_maker, clock=clock)

    return factory


@pytest.fixture
def vault(make_vault):
    return make_vault()


@pytest.fixture
def funded_vault(vault):
    """Vault после первого mint Alice: 3000 WETH-единиц и 3000 USDC при тике 0."""
    vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)
    return vault


# =============================================================================
# ПЕРВЫЙ MINT
# =============================================================================


class TestInitialMint:
    """Первый mint в пустой пул."""

    def test_preview(self, vault):
        amounts = vault.get_mint_amounts(ONE_WETH, 3_000 * USDC)

        assert amounts.base_amount == 3_000 * USDC
        assert amounts.quote_amount == 3_000 * USDC
        assert amounts.shares == FIRST_SHARES

    def test_mint(self, vault, ledger):
        result = vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)

        assert result.base_in == 3_000 * USDC
        assert result.quote_in == 3_000 * USDC
        assert vault.balance_of(ALICE) == FIRST_SHARES
        assert vault.balance_of(VAULT) == 1_000
        assert vault.state.total_shares == FIRST_SHARES + 1_000
        assert ledger.total_supply(SHARES) == vault.state.total_shares
        assert vault.get_vault_balances() == (3_000 * USDC, 3_000 * USDC)

    def test_checkpoint_after_mint(self, funded_vault, clock):
        assert funded_vault.state.last_value_in_quote == 6_000 * USDC
        assert funded_vault.state.last_checkpoint_time == clock.now

    def test_shares_mismatch(self, vault, ledger):
        with pytest.raises(InitialMintSharesMismatch) as exc_info:
            vault.mint(ALICE, FIRST_SHARES + 1, ONE_WETH, 3_000 * USDC)

        assert exc_info.value.expected == FIRST_SHARES
        assert exc_info.value.requested == FIRST_SHARES + 1
        assert vault.state.total_shares == 0
        assert ledger.balance_of(QUOTE, ALICE) == 100_000 * USDC

    def test_zero_shares(self, vault):
        with pytest.raises(ZeroAmount):
            vault.mint(ALICE, 0, ONE_WETH, 3_000 * USDC)

    def test_exceeds_max_value(self, make_vault, ledger):
        vault = make_vault(max_value_in_quote=5_000 * USDC)

        with pytest.raises(DepositExceedsMaxTotal) as exc_info:
            vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)

        assert exc_info.value.deposit_value == 6_000 * USDC
        assert vault.state.total_shares == 0
        assert ledger.balance_of(BASE, VAULT) == 0

    def test_value_overflow(self, make_vault, ledger):
        vault = make_vault(quote_offset_decimals=30)
        ledger.mint(BASE, ALICE, 2**200)
        ledger.mint(QUOTE, ALICE, 2**200)

        with pytest.raises(QuoteAmountOverflow):
            vault.mint(ALICE, 1, 2**200, 2**200)


# =============================================================================
# ПОСЛЕДУЮЩИЕ MINT / BURN
# =============================================================================


class TestMintBurn:
    """mint и burn в непустой пул."""

    def test_proportional_mint(self, funded_vault):
        shares = 2 * 10**20
        amounts = funded_vault.get_mint_amounts(100 * USDC, 100 * USDC)
        assert amounts.shares == shares

        result = funded_vault.mint(BOB, shares, 100 * USDC, 100 * USDC)

        assert result.base_in == 100 * USDC
        assert result.quote_in == 100 * USDC
        assert funded_vault.balance_of(BOB) == shares

    def test_mint_rounds_up(self, funded_vault):
        shares = 10**20 + 1
        result = funded_vault.mint(BOB, shares, 100 * USDC, 100 * USDC)

        assert result.base_in == 50 * USDC + 1
        assert result.quote_in == 50 * USDC + 1

    def test_mint_slippage(self, funded_vault, ledger):
        with pytest.raises(SlippageExceeded):
            funded_vault.mint(BOB, 2 * 10**20, 99 * USDC, 100 * USDC)

        assert funded_vault.balance_of(BOB) == 0
        assert ledger.balance_of(BASE, BOB) == 10 * ONE_WETH

    def test_mint_exceeds_max_value(self, funded_vault, ledger):
        funded_vault.set_max_value_in_quote(MANAGER, 6_000 * USDC)

        with pytest.raises(DepositExceedsMaxTotal):
            funded_vault.mint(BOB, 2 * 10**20, 100 * USDC, 100 * USDC)

        assert funded_vault.balance_of(BOB) == 0
        assert ledger.balance_of(QUOTE, BOB) == 100_000 * USDC

    def test_burn_half(self, funded_vault, ledger):
        shares = FIRST_SHARES // 2
        preview = funded_vault.get_underlying_balances(shares)
        result = funded_vault.burn(ALICE, shares, 0, 0)

        assert (result.base_out, result.quote_out) == preview
        assert result.base_out == shares * 3_000 * USDC // (FIRST_SHARES + 1_000)
        assert funded_vault.balance_of(ALICE) == FIRST_SHARES - shares
        assert ledger.balance_of(QUOTE, ALICE) == 97_000 * USDC + result.quote_out

    def test_burn_rounds_down(self, funded_vault):
        # (2e12 + 1) * 3e9 / 6e21 = 1 + 5e-13
        result = funded_vault.burn(ALICE, 2 * 10**12 + 1, 0, 0)

        assert (result.base_out, result.quote_out) == (1, 1)

    def test_burn_slippage(self, funded_vault):
        with pytest.raises(SlippageExceeded):
            funded_vault.burn(ALICE, FIRST_SHARES // 2, 3_000 * USDC, 0)

        assert funded_vault.balance_of(ALICE) == FIRST_SHARES

    def test_burn_insufficient_shares(self, funded_vault):
        with pytest.raises(InsufficientShares):
            funded_vault.burn(BOB, 1, 0, 0)

    def test_burn_zero(self, funded_vault):
        with pytest.raises(ZeroAmount):
            funded_vault.burn(ALICE, 0, 0, 0)

    @pytest.mark.parametrize(
        "shares,max_base,max_quote",
        [(-1, 100 * USDC, 100 * USDC), (10**20, -1, 100 * USDC), (10**20, 100 * USDC, 1.5)],
    )
    def test_mint_invalid_amount(self, funded_vault, ledger, shares, max_base, max_quote):
        total_before = funded_vault.state.total_shares

        with pytest.raises(InvalidAmount):
            funded_vault.mint(BOB, shares, max_base, max_quote)

        assert funded_vault.state.total_shares == total_before
        assert ledger.balance_of(QUOTE, BOB) == 100_000 * USDC

    def test_mint_unfunded_caller(self, funded_vault, ledger):
        with pytest.raises(InsufficientFunds):
            funded_vault.mint("carol", 10**20, 100 * USDC, 100 * USDC)

        assert ledger.total_supply(SHARES) == funded_vault.state.total_shares
        assert funded_vault.get_vault_balances() == (3_000 * USDC, 3_000 * USDC)

    def test_mint_without_allowance(self, funded_vault, ledger):
        ledger.approve(QUOTE, BOB, VAULT, 0)

        with pytest.raises(InsufficientFunds):
            funded_vault.mint(BOB, 10**20, 100 * USDC, 100 * USDC)

        assert ledger.balance_of(BASE, BOB) == 10 * ONE_WETH
        assert funded_vault.balance_of(BOB) == 0

    @pytest.mark.parametrize("shares,min_base_out", [(-5, 0), (10**20, -1)])
    def test_burn_invalid_amount(self, funded_vault, ledger, shares, min_base_out):
        with pytest.raises(InvalidAmount):
            funded_vault.burn(ALICE, shares, min_base_out, 0)

        assert funded_vault.balance_of(ALICE) == FIRST_SHARES
        assert ledger.total_supply(SHARES) == funded_vault.state.total_shares

    def test_locked_liquidity_keeps_pool_non_empty(self, funded_vault):
        funded_vault.burn(ALICE, FIRST_SHARES, 0, 0)

        assert funded_vault.state.total_shares == 1_000
        base, quote = funded_vault.get_total_balances()
        assert base > 0 and quote > 0


# =============================================================================
# КОМИССИИ
# =============================================================================


class TestFees:
    """Начисление комиссий."""

    def test_management_fee_after_year(self, make_vault, clock):
        vault = make_vault(fee_data=FeeData(management_fee=5_000, fee_recipient=TREASURY))
        vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)
        total_before = vault.state.total_shares

        clock.now += SECONDS_PER_YEAR
        result = vault.accrue_fees()

        fee_value = 300 * USDC
        expected = fee_value * total_before // (6_000 * USDC - fee_value)
        assert result.fee_shares == expected
        assert vault.balance_of(TREASURY) == expected
        assert vault.state.total_shares == total_before + expected
        assert vault.state.last_checkpoint_time == clock.now
        assert vault.events.last(AccrueFeesEvent).fee_shares == expected

    def test_performance_fee_on_growth(self, make_vault, ledger):
        vault = make_vault(fee_data=FeeData(performance_fee=20_000, fee_recipient=TREASURY))
        vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)
        total_before = vault.state.total_shares

        # +10% прибыли от market making
        ledger.mint(QUOTE, VAULT, 600 * USDC)
        result = vault.accrue_fees()

        assert result.fee_value == 120 * USDC
        assert result.fee_shares == 120 * USDC * total_before // (6_480 * USDC)

        again = vault.accrue_fees()
        assert again.fee_shares == 0

    def test_fees_accrued_before_mint(self, make_vault, clock):
        vault = make_vault(fee_data=FeeData(management_fee=5_000, fee_recipient=TREASURY))
        vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)

        clock.now += SECONDS_PER_YEAR
        preview = vault.get_mint_amounts(100 * USDC, 100 * USDC)
        vault.mint(BOB, preview.shares, 100 * USDC, 100 * USDC)

        assert vault.balance_of(TREASURY) > 0
        assert vault.balance_of(BOB) == preview.shares

    def test_set_fee_data_accrues_at_old_rates(self, make_vault, clock):
        vault = make_vault(fee_data=FeeData(management_fee=5_000, fee_recipient=TREASURY))
        vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)

        clock.now += SECONDS_PER_YEAR
        vault.set_fee_data(MANAGER, 0, 0, "new-treasury")

        assert vault.balance_of(TREASURY) > 0
        assert vault.state.fee_data.fee_recipient == "new-treasury"
        assert vault.events.last(SetFeeDataEvent).fee_recipient == "new-treasury"

    def test_failed_mint_does_not_charge_fees(self, make_vault, ledger, clock):
        """Неудачный mint не фиксирует комиссии: следующее начисление — одно и полное."""
        vault = make_vault(fee_data=FeeData(management_fee=5_000, fee_recipient=TREASURY))
        vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)
        total_before = vault.state.total_shares

        clock.now += SECONDS_PER_YEAR
        with pytest.raises(InsufficientFunds):
            vault.mint("carol", 10**20, 100 * USDC, 100 * USDC)

        assert vault.state.total_shares == total_before
        assert ledger.total_supply(SHARES) == total_before
        assert vault.balance_of(TREASURY) == 0
        assert vault.state.last_value_in_quote == 6_000 * USDC
        assert vault.state.last_checkpoint_time == T0
        assert vault.events.last(AccrueFeesEvent) is None

        result = vault.accrue_fees()

        expected = 300 * USDC * total_before // (5_700 * USDC)
        assert result.fee_shares == expected
        assert vault.balance_of(TREASURY) == expected
        assert ledger.total_supply(SHARES) == vault.state.total_shares

    def test_set_fee_data_invalid_amount(self, vault):
        with pytest.raises(InvalidAmount):
            vault.set_fee_data(MANAGER, -1, 0, TREASURY)

    def test_fee_too_high(self, vault):
        with pytest.raises(FeeTooHigh):
            vault.set_fee_data(MANAGER, 50_001, 0, TREASURY)
        with pytest.raises(FeeTooHigh):
            vault.set_fee_data(MANAGER, 0, 5_001, TREASURY)

    def test_fee_recipient_required(self, vault):
        with pytest.raises(ZeroAddress):
            vault.set_fee_data(MANAGER, 0, 0, "")

    def test_set_fee_data_manager_only(self, vault):
        with pytest.raises(Unauthorized):
            vault.set_fee_data(ALICE, 0, 0, ALICE)


# =============================================================================
# РАЗМЕЩЕНИЕ СРЕДСТВ
# =============================================================================


LADDER = LadderParams(tick_index0=-5, tick_offset=1, step_size=1, price_points=10)


class TestPosition:
    """set_position / update_position."""

    def test_active_posts_ladder(self, funded_vault, market_maker):
        result = funded_vault.set_position(MANAGER, LADDER, FundsState.ACTIVE)

        assert result.posted
        assert result.bid_gives == 750 * USDC
        assert result.ask_gives == 600 * USDC
        assert market_maker.posted is not None
        assert funded_vault.get_vault_balances() == (0, 0)
        assert funded_vault.get_reserve_balances() == (3_000 * USDC, 3_000 * USDC)
        assert funded_vault.events.last(SetLadderPositionEvent).price_points == 10

    def test_active_requires_price_points(self, funded_vault):
        with pytest.raises(InvalidLadderParams):
            funded_vault.set_position(MANAGER, LadderParams(), FundsState.ACTIVE)

    def test_set_position_manager_only(self, funded_vault):
        with pytest.raises(Unauthorized):
            funded_vault.set_position(ALICE, LADDER, FundsState.ACTIVE)

    def test_mint_reposts_with_new_funds(self, funded_vault, market_maker):
        funded_vault.set_position(MANAGER, LADDER, FundsState.ACTIVE)
        funded_vault.mint(BOB, 2 * 10**20, 100 * USDC, 100 * USDC)

        event = funded_vault.events.last(PositionUpdateEvent)
        assert event.posted
        assert event.bid_gives == 3_100 * USDC // 4
        assert funded_vault.get_reserve_balances() == (3_100 * USDC, 3_100 * USDC)

    def test_burn_withdraws_from_reserve(self, funded_vault, ledger):
        funded_vault.set_position(MANAGER, LADDER, FundsState.ACTIVE)
        result = funded_vault.burn(ALICE, FIRST_SHARES // 2, 0, 0)

        assert result.base_out > 0
        assert funded_vault.get_vault_balances() == (0, 0)
        reserve_base, _ = funded_vault.get_reserve_balances()
        assert reserve_base == 3_000 * USDC - result.base_out

    def test_update_position_idempotent(self, funded_vault, market_maker):
        funded_vault.set_position(MANAGER, LADDER, FundsState.ACTIVE)
        posted = market_maker.posted

        result = funded_vault.update_position()

        assert result.posted
        assert market_maker.posted == posted
        assert funded_vault.get_reserve_balances() == (3_000 * USDC, 3_000 * USDC)

    def test_venue_failure_does_not_revert(self, funded_vault, market_maker):
        funded_vault.set_position(MANAGER, LADDER, FundsState.ACTIVE)
        market_maker.fail_posts = True

        result = funded_vault.mint(BOB, 2 * 10**20, 100 * USDC, 100 * USDC)

        assert result.quote_in == 100 * USDC
        assert funded_vault.balance_of(BOB) == 2 * 10**20
        assert market_maker.posted is None
        assert funded_vault.events.last(PositionUpdateEvent).reason.startswith("post_failed")

    def test_back_to_vault(self, funded_vault, market_maker):
        funded_vault.set_position(MANAGER, LADDER, FundsState.ACTIVE)
        funded_vault.set_position(MANAGER, LADDER, FundsState.VAULT)

        assert market_maker.posted is None
        assert funded_vault.get_reserve_balances() == (0, 0)
        assert funded_vault.get_vault_balances() == (3_000 * USDC, 3_000 * USDC)


# =============================================================================
# SWAP
# =============================================================================


@pytest.fixture
def swapper(ledger, oracle):
    ledger.mint(BASE, SWAPPER, 100_000 * USDC)
    ledger.mint(QUOTE, SWAPPER, 100_000 * USDC)
    return OracleSwapDelegate(SWAPPER, ledger, oracle, BASE)


class TestSwap:
    """Swap через разрешённый делегат."""

    def test_sell_base(self, funded_vault, swapper, ledger):
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)
        result = funded_vault.swap(MANAGER, swapper, 100 * USDC, 100 * USDC, sell=True)

        assert result.amount_out == 100 * USDC
        assert result.amount_in == 100 * USDC
        assert funded_vault.get_vault_balances() == (2_900 * USDC, 3_100 * USDC)
        assert ledger.allowance(BASE, VAULT, SWAPPER) == 0

        event = funded_vault.events.last(SwapEvent)
        assert event.base_change == -100 * USDC
        assert event.quote_change == 100 * USDC

    def test_buy_base_from_reserve(self, funded_vault, swapper):
        funded_vault.set_position(MANAGER, LADDER, FundsState.PASSIVE)
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)

        funded_vault.swap(MANAGER, swapper, 100 * USDC, 0, sell=False)

        assert funded_vault.get_total_balances() == (3_100 * USDC, 2_900 * USDC)
        assert funded_vault.get_vault_balances() == (0, 0)

    def test_slippage(self, funded_vault, ledger, oracle):
        delegate = OracleSwapDelegate(SWAPPER, ledger, oracle, BASE, haircut_bps=100)
        ledger.mint(QUOTE, SWAPPER, 1_000 * USDC)
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)

        with pytest.raises(SlippageExceeded):
            funded_vault.swap(MANAGER, delegate, 100 * USDC, 100 * USDC, sell=True)

    def test_slippage_restores_active_ladder(self, funded_vault, ledger, oracle, market_maker):
        """После SlippageExceeded средства снова в резерве и ладдер выставлен."""
        delegate = OracleSwapDelegate(SWAPPER, ledger, oracle, BASE, haircut_bps=100)
        ledger.mint(QUOTE, SWAPPER, 1_000 * USDC)
        funded_vault.set_position(MANAGER, LADDER, FundsState.ACTIVE)
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)
        state_before = funded_vault.state

        with pytest.raises(SlippageExceeded):
            funded_vault.swap(MANAGER, delegate, 100 * USDC, 100 * USDC, sell=True)

        assert funded_vault.get_vault_balances() == (0, 0)
        assert funded_vault.get_reserve_balances() == (2_900 * USDC, 3_099 * USDC)
        assert market_maker.posted is not None
        assert funded_vault.events.last(PositionUpdateEvent).posted
        assert funded_vault.events.last(SwapEvent) is None
        assert funded_vault.state == state_before
        assert ledger.allowance(BASE, VAULT, SWAPPER) == 0

    @pytest.mark.parametrize("amount_out,amount_in_min", [(-100, 0), (100 * USDC, -1)])
    def test_invalid_amount(self, funded_vault, swapper, amount_out, amount_in_min):
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)

        with pytest.raises(InvalidAmount):
            funded_vault.swap(MANAGER, swapper, amount_out, amount_in_min, sell=True)

        assert funded_vault.get_vault_balances() == (3_000 * USDC, 3_000 * USDC)

    def test_delegate_must_be_allowed(self, funded_vault, swapper):
        with pytest.raises(UnauthorizedSwapDelegate):
            funded_vault.swap(MANAGER, swapper, 100 * USDC, 0, sell=True)

        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)
        funded_vault.disallow_swap_delegate(MANAGER, SWAPPER)
        with pytest.raises(UnauthorizedSwapDelegate):
            funded_vault.swap(MANAGER, swapper, 100 * USDC, 0, sell=True)

    def test_manager_only(self, funded_vault, swapper):
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)
        with pytest.raises(Unauthorized):
            funded_vault.swap(ALICE, swapper, 100 * USDC, 0, sell=True)

    def test_zero_amount(self, funded_vault, swapper):
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)
        with pytest.raises(ZeroAmount):
            funded_vault.swap(MANAGER, swapper, 0, 0, sell=True)

    def test_reentrant_mint_rejected(self, funded_vault, swapper):
        swapper.on_execute = lambda: funded_vault.mint(ALICE, 1, ONE_WETH, ONE_WETH)
        funded_vault.allow_swap_delegate(MANAGER, SWAPPER)

        with pytest.raises(ReentrantCall):
            funded_vault.swap(MANAGER, swapper, 100 * USDC, 0, sell=True)

        swapper.on_execute = None
        funded_vault.swap(MANAGER, swapper, 100 * USDC, 0, sell=True)


# =============================================================================
# MANAGER
# =============================================================================


class TestManagerOperations:
    """Операции manager."""

    def test_withdraw_foreign_asset(self, funded_vault, ledger):
        ledger.mint("AIRDROP", VAULT, 5)
        funded_vault.withdraw_asset(MANAGER, "AIRDROP", 5, MANAGER)

        assert ledger.balance_of("AIRDROP", MANAGER) == 5

    @pytest.mark.parametrize("asset", [BASE, QUOTE, SHARES])
    def test_cannot_withdraw_pool_asset(self, funded_vault, asset):
        with pytest.raises(CannotWithdrawPoolAsset):
            funded_vault.withdraw_asset(MANAGER, asset, 1, MANAGER)

    def test_withdraw_manager_only(self, funded_vault):
        with pytest.raises(Unauthorized):
            funded_vault.withdraw_asset(ALICE, "AIRDROP", 1, ALICE)

    def test_set_max_value_manager_only(self, funded_vault):
        with pytest.raises(Unauthorized):
            funded_vault.set_max_value_in_quote(ALICE, 0)

    def test_negative_amounts_rejected(self, funded_vault, ledger):
        ledger.mint("AIRDROP", VAULT, 5)

        with pytest.raises(InvalidAmount):
            funded_vault.set_max_value_in_quote(MANAGER, -1)
        with pytest.raises(InvalidAmount):
            funded_vault.withdraw_asset(MANAGER, "AIRDROP", -5, MANAGER)

        assert ledger.balance_of("AIRDROP", VAULT) == 5


# =============================================================================
# ОШИБКИ ПЕРЕВОДОВ
# =============================================================================


class FailingLedger(InMemoryLedger):
    """Леджер, отклоняющий любые переводы failing_asset."""

    def __init__(self):
        super().__init__()
        self.failing_asset = None

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        if asset == self.failing_asset:
            raise LedgerError(f"{asset} transfers are halted")
        super().transfer(asset, sender, recipient, amount)


class TestFailedTransfers:
    """Ошибка леджера посреди mint/burn не ломает учёт долей и комиссий."""

    @pytest.fixture
    def ledger(self):
        return fund_users(FailingLedger())

    @pytest.fixture
    def fee_vault(self, make_vault):
        vault = make_vault(fee_data=FeeData(management_fee=5_000, fee_recipient=TREASURY))
        vault.mint(ALICE, FIRST_SHARES, ONE_WETH, 3_000 * USDC)
        return vault

    @pytest.mark.parametrize("asset", [BASE, QUOTE])
    def test_mint_transfer_failure(self, fee_vault, ledger, clock, asset):
        total_before = fee_vault.state.total_shares
        clock.now += SECONDS_PER_YEAR
        ledger.failing_asset = asset

        with pytest.raises(LedgerError):
            fee_vault.mint(BOB, 10**20, 100 * USDC, 100 * USDC)

        assert ledger.total_supply(SHARES) == fee_vault.state.total_shares == total_before
        assert fee_vault.state.last_checkpoint_time == T0
        assert ledger.balance_of(BASE, BOB) == 10 * ONE_WETH
        assert ledger.balance_of(QUOTE, BOB) == 100_000 * USDC
        assert fee_vault.get_vault_balances() == (3_000 * USDC, 3_000 * USDC)

        ledger.failing_asset = None
        result = fee_vault.accrue_fees()
        assert result.fee_shares == 300 * USDC * total_before // (5_700 * USDC)

    def test_burn_transfer_failure(self, fee_vault, ledger):
        ledger.failing_asset = BASE

        with pytest.raises(LedgerError):
            fee_vault.burn(ALICE, FIRST_SHARES // 2, 0, 0)

        assert fee_vault.balance_of(ALICE) == FIRST_SHARES
        assert ledger.total_supply(SHARES) == fee_vault.state.total_shares
        assert fee_vault.get_vault_balances() == (3_000 * USDC, 3_000 * USDC)


# =============================================================================
# СОХРАНЕНИЕ СТОИМОСТИ
# =============================================================================


class TestValueConservation:
    """Округление mint/burn всегда в пользу пула (тик 0: стоимость = base + quote)."""

    def test_mint_burn_sequence(self, funded_vault, ledger):
        steps = [
            ("mint", BOB, 10**20 + 7),
            ("burn", ALICE, 10**21 + 3),
            ("mint", ALICE, 3 * 10**19 + 1),
            ("burn", BOB, 5 * 10**19 + 11),
        ]

        for op, user, shares in steps:
            value = sum(funded_vault.get_total_balances())
            supply = funded_vault.state.total_shares

            if op == "mint":
                result = funded_vault.mint(user, shares, 100 * USDC, 100 * USDC)
                paid = result.base_in + result.quote_in
                assert 0 <= paid * supply - shares * value < 2 * supply
            else:
                result = funded_vault.burn(user, shares, 0, 0)
                received = result.base_out + result.quote_out
                assert 0 <= shares * value - received * supply < 2 * supply

            assert ledger.total_supply(SHARES) == funded_vault.state.total_shares


# =============================================================================
# EVENTS
# =============================================================================


class TestEvents:
    """Журнал событий."""

    def test_mint_events(self, funded_vault):
        mint = funded_vault.events.last(MintEvent)

        assert mint.user == ALICE
        assert mint.shares == FIRST_SHARES
        assert mint.tick == 0
        assert funded_vault.events.last(UpdateLastValueInQuoteEvent).value_in_quote == 6_000 * USDC
        assert funded_vault.events.last(PositionUpdateEvent).reason == "vault"

    def test_burn_event(self, funded_vault):
        result = funded_vault.burn(ALICE, FIRST_SHARES // 2, 0, 0)
        burn = funded_vault.events.last(BurnEvent)

        assert burn.base_amount == result.base_out
        assert burn.quote_amount == result.quote_out

    def test_failed_operation_emits_nothing(self, funded_vault):
        count = len(funded_vault.events)
        with pytest.raises(SlippageExceeded):
            funded_vault.mint(BOB, 2 * 10**20, 0, 0)

        assert len(funded_vault.events) == count
