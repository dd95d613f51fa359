# catalog/tests/test_customization.py

from decimal import Decimal

from django.test import SimpleTestCase

from catalog.customization import (
    customization_price,
    option_modifier,
    parse_customization_schema,
    resolve_selections,
    validate_required,
)
from core.exceptions import ValidationError


def _schema(**overrides):
    schema = {
        "options": [
            {
                "id": "color",
                "type": "color",
                "label": "Kolor",
                "required": True,
                "priceType": "add",
                "multipleColors": True,
                "colorLimit": 2,
                "colorOptions": [
                    {"name": "Red", "hex": "#ff0000", "priceModifier": 5},
                    {"name": "Blue", "hex": "#0000ff", "priceModifier": 3},
                    {"name": "Green", "hex": "#00ff00"},
                ],
            },
            {
                "id": "size",
                "type": "size",
                "label": "Rozmiar",
                "priceType": "multiply",
                "sizeOptions": [
                    {"name": "S", "dimensions": "10cm", "priceModifier": 1},
                    {"name": "L", "dimensions": "20cm", "priceModifier": 1.5},
                ],
            },
            {
                "id": "engraving",
                "type": "text",
                "label": "Grawer",
                "priceType": "free_limit",
                "freeLimit": 5,
                "unitPrice": "0.50",
                "textConfig": {"maxLength": 20, "allowEmoji": False},
                "fontOptions": ["Arial", "Roboto"],
                "positionOptions": ["front", "back"],
            },
            {
                "id": "logo",
                "type": "file",
                "label": "Logo",
                "priceType": "add",
                "unitPrice": "10.00",
                "fileConfig": {"allowedFormats": ["png", "svg"], "maxFiles": 1, "maxSizeMB": 5},
            },
        ],
        "nonRefundable": True,
        "nonRefundableReason": "Produkt personalizowany",
    }
    schema.update(overrides)
    return schema


class SchemaParsingTests(SimpleTestCase):
    def test_empty_schema_is_none(self):
        self.assertIsNone(parse_customization_schema(None))
        self.assertIsNone(parse_customization_schema({}))

    def test_parses_tagged_union(self):
        parsed = parse_customization_schema(_schema())

        self.assertTrue(parsed.non_refundable)
        self.assertEqual(parsed.non_refundable_reason, "Produkt personalizowany")
        self.assertEqual([o.type for o in parsed.options], ["color", "size", "text", "file"])

        color = parsed.get_option("color")
        self.assertTrue(color.multiple)
        self.assertEqual(color.choice_limit, 2)
        self.assertIsNone(color.find_choice("Green").price_modifier)
        self.assertEqual(color.find_choice("Red").price_modifier, Decimal("5"))

        text = parsed.get_option("engraving")
        self.assertEqual(text.text_config.max_length, 20)
        self.assertEqual(text.unit_price, Decimal("0.50"))

    def test_unknown_type_rejected(self):
        with self.assertRaises(ValidationError):
            parse_customization_schema({"options": [{"id": "x", "type": "laser", "label": "X"}]})

    def test_invalid_material_code_rejected(self):
        raw = {
            "options": [
                {
                    "id": "mat",
                    "type": "material",
                    "label": "Materiał",
                    "materialOptions": [{"name": "Nylon", "code": "pa12"}],
                }
            ]
        }
        with self.assertRaises(ValidationError):
            parse_customization_schema(raw)

    def test_duplicate_option_ids_rejected(self):
        opt = {"id": "a", "type": "text", "label": "A"}
        with self.assertRaises(ValidationError):
            parse_customization_schema({"options": [opt, dict(opt)]})

    def test_invalid_price_type_rejected(self):
        raw = {"options": [{"id": "a", "type": "text", "label": "A", "priceType": "discount"}]}
        with self.assertRaises(ValidationError):
            parse_customization_schema(raw)


class PricerTests(SimpleTestCase):
    def setUp(self):
        self.schema = parse_customization_schema(_schema())

    def test_add_sums_selected_choice_modifiers(self):
        color = self.schema.get_option("color")
        mod = option_modifier(color, {"selectedColors": ["Red", "Green"]})
        self.assertEqual(mod.amount, Decimal("5.00"))
        self.assertEqual(mod.factor, Decimal("1"))

    def test_unselected_option_is_neutral(self):
        color = self.schema.get_option("color")
        self.assertTrue(option_modifier(color, None).is_neutral)
        self.assertTrue(option_modifier(color, {"selectedColors": []}).is_neutral)

    def test_free_limit_charges_only_units_beyond_limit(self):
        text = self.schema.get_option("engraving")
        # 11 characters, 5 free -> 6 * 0.50
        mod = option_modifier(text, {"textValue": "Hello World"})
        self.assertEqual(mod.amount, Decimal("3.00"))

        within = option_modifier(text, {"textValue": "Hi"})
        self.assertEqual(within.amount, Decimal("0.00"))

    def test_free_limit_on_colors_charges_in_selection_order(self):
        raw = _schema()
        raw["options"][0]["priceType"] = "free_limit"
        raw["options"][0]["freeLimit"] = 1
        color = parse_customization_schema(raw).get_option("color")

        mod = option_modifier(color, {"selectedColors": ["Red", "Blue"]})
        self.assertEqual(mod.amount, Decimal("3.00"))

    def test_multiply_is_attributed_to_its_selection(self):
        size = self.schema.get_option("size")
        color = self.schema.get_option("color")

        result = customization_price(
            Decimal("100.00"),
            [
                (size, {"selectedSize": "L"}),
                (color, {"selectedColors": ["Red"]}),
            ],
        )

        self.assertEqual(result.deltas, (Decimal("50.00"), Decimal("5.00")))
        self.assertEqual(result.total, Decimal("55.00"))

    def test_file_add_charges_unit_price_once(self):
        logo = self.schema.get_option("logo")
        mod = option_modifier(
            logo, {"uploadedFiles": [{"id": "f1", "name": "logo.png", "url": "/uploads/logo.png"}]}
        )
        self.assertEqual(mod.amount, Decimal("10.00"))


class SelectionResolutionTests(SimpleTestCase):
    def setUp(self):
        self.schema = parse_customization_schema(_schema())

    def test_client_price_modifier_is_not_trusted(self):
        selections, total = resolve_selections(
            self.schema,
            [{"optionId": "color", "selectedColors": [{"name": "Red", "priceModifier": 999}]}],
            base_price=Decimal("50.00"),
        )

        self.assertEqual(total, Decimal("5.00"))
        self.assertEqual(selections[0]["priceModifier"], "5.00")
        self.assertEqual(selections[0]["optionLabel"], "Kolor")
        self.assertEqual(selections[0]["selectedColors"][0]["hex"], "#ff0000")
        self.assertEqual(selections[0]["selectedColors"][0]["priceModifier"], "5.00")

    def test_unknown_option_rejected(self):
        with self.assertRaises(ValidationError):
            resolve_selections(self.schema, [{"optionId": "nope"}], base_price=Decimal("1.00"))

    def test_unknown_choice_rejected(self):
        with self.assertRaises(ValidationError):
            resolve_selections(
                self.schema,
                [{"optionId": "color", "selectedColors": ["Purple"]}],
                base_price=Decimal("1.00"),
            )

    def test_color_limit_enforced(self):
        with self.assertRaises(ValidationError):
            resolve_selections(
                self.schema,
                [{"optionId": "color", "selectedColors": ["Red", "Blue", "Green"]}],
                base_price=Decimal("1.00"),
            )

    def test_text_rules_enforced(self):
        too_long = [{"optionId": "engraving", "textValue": "x" * 21}]
        with self.assertRaises(ValidationError):
            resolve_selections(self.schema, too_long, base_price=Decimal("1.00"))

        emoji = [{"optionId": "engraving", "textValue": "Hi \U0001F600"}]
        with self.assertRaises(ValidationError):
            resolve_selections(self.schema, emoji, base_price=Decimal("1.00"))

        bad_font = [{"optionId": "engraving", "textValue": "Hi", "fontFamily": "Comic Sans"}]
        with self.assertRaises(ValidationError):
            resolve_selections(self.schema, bad_font, base_price=Decimal("1.00"))

    def test_file_format_enforced(self):
        files = [
            {
                "optionId": "logo",
                "uploadedFiles": [{"id": "f1", "name": "logo.exe", "url": "/uploads/logo.exe"}],
            }
        ]
        with self.assertRaises(ValidationError):
            resolve_selections(self.schema, files, base_price=Decimal("1.00"))

    def test_empty_selection_is_dropped(self):
        selections, total = resolve_selections(
            self.schema,
            [{"optionId": "engraving", "textValue": "   "}],
            base_price=Decimal("1.00"),
        )
        self.assertEqual(selections, [])
        self.assertEqual(total, Decimal("0.00"))

    def test_validate_required_names_missing_labels(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_required(self.schema, [])
        self.assertIn("Kolor", ctx.exception.message)

        selections, _ = resolve_selections(
            self.schema,
            [{"optionId": "color", "selectedColors": ["Blue"]}],
            base_price=Decimal("1.00"),
        )
        validate_required(self.schema, selections)
