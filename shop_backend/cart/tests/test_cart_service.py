# cart/tests/test_cart_service.py

from decimal import Decimal

from django.test import SimpleTestCase

from cart.services.cart import CART_SCHEMA_VERSION, Cart, ProductRef, upgrade_cart_payload
from core.exceptions import ValidationError

KEY = "layered-cart"

VASE = ProductRef(id="p-vase", name="Wazon Spiral", price=Decimal("89.00"))
LAMP = ProductRef(
    id="p-lamp", name="Lampa Voronoi", price=Decimal("249.00"), non_refundable=True
)

PETG = [
    {
        "optionId": "material",
        "optionLabel": "Materiał",
        "type": "material",
        "selectedMaterial": {"name": "PETG", "code": "petg", "priceModifier": 15},
        "priceModifier": "15.00",
    }
]


class CartAggregatorTests(SimpleTestCase):
    """
    Cart aggregator tests.

    GUARANTEES:
    - Uncustomized adds merge, customized adds never do
    - Totals = sum((price + customization_price) * quantity)
    - Every mutation is written back to the store
    """

    def setUp(self):
        self.store = {}
        self.cart = Cart(self.store, key=KEY)

    def test_identical_uncustomized_adds_merge(self):
        self.cart.add_item(VASE)
        self.cart.add_item(VASE)

        self.assertEqual(len(self.cart), 1)
        self.assertEqual(self.cart.lines[0].quantity, 2)

    def test_customized_adds_produce_separate_lines(self):
        first = self.cart.add_item(LAMP, PETG, Decimal("15.00"))
        second = self.cart.add_item(LAMP, PETG, Decimal("15.00"))

        self.assertEqual(len(self.cart), 2)
        self.assertNotEqual(first.cart_item_id, second.cart_item_id)
        self.assertEqual(first.id, second.id)

    def test_uncustomized_add_does_not_merge_into_customized_line(self):
        self.cart.add_item(LAMP, PETG, Decimal("15.00"))
        self.cart.add_item(LAMP)

        self.assertEqual(len(self.cart), 2)

    def test_totals_example(self):
        self.cart.add_item(VASE)
        self.cart.add_item(VASE)
        self.cart.add_item(LAMP, PETG, Decimal("15.00"))

        self.assertEqual(self.cart.total_items, 3)
        self.assertEqual(self.cart.total_price, Decimal("442.00"))
        self.assertTrue(self.cart.has_non_refundable)

    def test_update_quantity_zero_removes(self):
        line = self.cart.add_item(VASE)
        self.cart.update_quantity(line.cart_item_id, 0)
        self.assertEqual(len(self.cart), 0)

    def test_update_quantity_rejects_non_integer(self):
        line = self.cart.add_item(VASE)
        for bad in (2.5, "3", None, True):
            with self.assertRaises(ValidationError):
                self.cart.update_quantity(line.cart_item_id, bad)

    def test_unknown_ids_are_noops(self):
        self.cart.add_item(VASE)
        self.cart.remove_item("cart_missing")
        self.cart.update_quantity("cart_missing", 5)
        self.cart.update_customizations("cart_missing", PETG, Decimal("15.00"))

        self.assertEqual(self.cart.total_items, 1)

    def test_update_customizations_replaces_cached_price(self):
        line = self.cart.add_item(LAMP, PETG, Decimal("15.00"))
        self.cart.update_customizations(line.cart_item_id, [], Decimal("15.00"))

        self.assertEqual(line.customization_price, Decimal("0.00"))
        self.assertEqual(self.cart.total_price, Decimal("249.00"))

    def test_acceptance_and_clear(self):
        line = self.cart.add_item(LAMP)
        self.cart.set_non_refundable_accepted(line.cart_item_id, True)
        self.assertTrue(self.cart.get(line.cart_item_id).non_refundable_accepted)

        self.cart.clear()
        self.assertEqual(self.store[KEY], {"version": CART_SCHEMA_VERSION, "items": []})

    def test_mutations_are_persisted_and_rehydrated(self):
        self.cart.add_item(VASE)
        self.cart.add_item(LAMP, PETG, Decimal("15.00"))

        reloaded = Cart(self.store, key=KEY)

        self.assertEqual(reloaded.total_price, Decimal("353.00"))
        self.assertEqual(reloaded.lines[1].customizations, PETG)


class CartSchemaUpgradeTests(SimpleTestCase):
    def test_v1_list_gets_envelope_and_line_ids(self):
        legacy = [
            {"id": "p-vase", "name": "Wazon", "price": 89, "image": "", "quantity": 2},
            {"id": "p-lamp", "name": "Lampa", "price": 249, "quantity": 1, "cartItemId": "cart_keep"},
        ]

        upgraded = upgrade_cart_payload(legacy)

        self.assertEqual(upgraded["version"], CART_SCHEMA_VERSION)
        ids = [i["cartItemId"] for i in upgraded["items"]]
        self.assertTrue(ids[0].startswith("cart_"))
        self.assertEqual(ids[1], "cart_keep")

    def test_load_upgrades_store_once(self):
        store = {KEY: [{"id": "p-vase", "name": "Wazon", "price": 89, "quantity": 2}]}

        cart = Cart(store, key=KEY)

        self.assertEqual(cart.total_price, Decimal("178.00"))
        self.assertEqual(store[KEY]["version"], CART_SCHEMA_VERSION)
        line_id = store[KEY]["items"][0]["cartItemId"]

        # second load keeps the assigned id
        self.assertEqual(Cart(store, key=KEY).lines[0].cart_item_id, line_id)

    def test_garbage_payload_is_discarded(self):
        self.assertEqual(upgrade_cart_payload("nope")["items"], [])
        self.assertEqual(upgrade_cart_payload({"version": 99})["items"], [])
