"""Tests for the per-user shopping cart."""

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFound, ValidationError
from storefront.core.security import TokenService
from storefront.models.shop import Product
from storefront.models.user import CartItem, User
from storefront.modules.accounts import AccountService
from storefront.modules.shop import CartService, CatalogService

from conftest import FakeBlobStore


@pytest.fixture
def cart(db_session: AsyncSession) -> CartService:
    return CartService(db_session)


@pytest_asyncio.fixture
async def buyer_id(db_session: AsyncSession, token_service: TokenService) -> int:
    accounts = AccountService(db_session, token_service)
    buyer, _ = await accounts.register("Buyer", "buyer@example.com", "pw", "buyer")
    return buyer.id


@pytest_asyncio.fixture
async def products(
    db_session: AsyncSession, token_service: TokenService, blob_store: FakeBlobStore
) -> list[Product]:
    accounts = AccountService(db_session, token_service)
    seller, _ = await accounts.register("Seller", "seller@example.com", "pw", "seller")
    catalog = CatalogService(db_session, blob_store)
    return [
        await catalog.create(seller.id, name="Apple", price=10, quantity=5),
        await catalog.create(seller.id, name="Flour", price="1.25", quantity=50, unit="kg"),
    ]


def cart_state(user) -> list[tuple[int, int]]:
    return [(item.product_id, item.quantity) for item in user.cart]


class TestAddOrUpdate:
    async def test_new_entry_appended(self, cart: CartService, buyer_id, products):
        apple, flour = products

        await cart.add_or_update(buyer_id, apple.id, 2)
        user = await cart.add_or_update(buyer_id, flour.id, 1)

        assert cart_state(user) == [(apple.id, 2), (flour.id, 1)]

    async def test_existing_entry_quantities_accumulate(
        self, cart: CartService, buyer_id, products
    ):
        apple, _ = products
        await cart.add_or_update(buyer_id, apple.id, 2)

        user = await cart.add_or_update(buyer_id, apple.id, 3, remove=False)

        assert cart_state(user) == [(apple.id, 5)]

    async def test_remove_ignores_quantity(self, cart: CartService, buyer_id, products):
        apple, flour = products
        await cart.add_or_update(buyer_id, apple.id, 2)
        await cart.add_or_update(buyer_id, flour.id, 4)

        user = await cart.add_or_update(buyer_id, apple.id, 99, remove=True)

        assert cart_state(user) == [(flour.id, 4)]

    async def test_remove_absent_entry_is_noop(self, cart: CartService, buyer_id, products):
        apple, flour = products
        await cart.add_or_update(buyer_id, apple.id, 1)

        user = await cart.add_or_update(buyer_id, flour.id, 0, remove=True)

        assert cart_state(user) == [(apple.id, 1)]

    async def test_removal_is_persisted(
        self, cart: CartService, buyer_id, products, session_maker
    ):
        apple, _ = products
        await cart.add_or_update(buyer_id, apple.id, 1)
        await cart.add_or_update(buyer_id, apple.id, 1, remove=True)

        async with session_maker() as fresh:
            assert await CartService(fresh).get_items(buyer_id) == []

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    async def test_quantity_must_be_positive_int(
        self, cart: CartService, buyer_id, products, quantity
    ):
        apple, _ = products
        with pytest.raises(ValidationError):
            await cart.add_or_update(buyer_id, apple.id, quantity)

    async def test_unknown_product_not_found(self, cart: CartService, buyer_id):
        with pytest.raises(NotFound):
            await cart.add_or_update(buyer_id, 4242, 1)

    async def test_racing_adds_share_one_entry(self, buyer_id, products, session_maker):
        apple, _ = products

        async with session_maker() as first, session_maker() as second:
            # Second request read the cart before the first one wrote it
            stale = await second.get(User, buyer_id)
            assert stale.cart == []

            await CartService(first).add_or_update(buyer_id, apple.id, 2)
            user = await CartService(second).add_or_update(buyer_id, apple.id, 3)

            assert cart_state(user) == [(apple.id, 5)]

        async with session_maker() as fresh:
            lines = await CartService(fresh).get_items(buyer_id)
        assert [(line["productId"], line["quantity"]) for line in lines] == [(apple.id, 5)]

    async def test_duplicate_entry_rejected_by_database(
        self, db_session: AsyncSession, buyer_id, products
    ):
        apple, _ = products
        db_session.add(CartItem(user_id=buyer_id, product_id=apple.id, quantity=1))
        await db_session.commit()

        db_session.add(CartItem(user_id=buyer_id, product_id=apple.id, quantity=1))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    async def test_unknown_user_not_found(self, cart: CartService, products):
        with pytest.raises(NotFound):
            await cart.add_or_update(4242, products[0].id, 1)


class TestGetItems:
    async def test_lines_join_current_product_data(
        self, cart: CartService, buyer_id, products
    ):
        apple, flour = products
        await cart.add_or_update(buyer_id, flour.id, 2)
        await cart.add_or_update(buyer_id, apple.id, 3)

        lines = await cart.get_items(buyer_id)

        assert lines == [
            {
                "productId": flour.id,
                "name": "Flour",
                "quantity": 2,
                "price": 1.25,
                "unit": "kg",
                "imageUrl": None,
            },
            {
                "productId": apple.id,
                "name": "Apple",
                "quantity": 3,
                "price": 10.0,
                "unit": "g",
                "imageUrl": None,
            },
        ]

    async def test_empty_cart(self, cart: CartService, buyer_id):
        assert await cart.get_items(buyer_id) == []

    async def test_deleted_product_is_skipped(
        self, cart: CartService, buyer_id, products, db_session, blob_store
    ):
        apple, flour = products
        await cart.add_or_update(buyer_id, apple.id, 1)
        await cart.add_or_update(buyer_id, flour.id, 1)

        await CatalogService(db_session, blob_store).delete(apple.seller_id, apple.id)
        lines = await cart.get_items(buyer_id)

        assert [line["productId"] for line in lines] == [flour.id]
        # The dangling entry itself stays on the user record
        user = await cart.add_or_update(buyer_id, flour.id, 1)
        assert cart_state(user) == [(apple.id, 1), (flour.id, 2)]
