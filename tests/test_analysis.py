from erdiagram import Graph, IssueSeverity, find_connected_components, summarize_graph, validate_data, validation_summary

from conftest import entity, relation


def messages(issues, severity):
    return [i.message for i in issues if i.severity == severity]


class TestValidation:

    def test_clean_data(self, customer_order):
        issues = validate_data(customer_order)

        assert issues == []
        assert validation_summary(issues)["valid"]

    def test_empty_data(self):
        issues = validate_data({})

        assert [i.severity for i in issues] == [IssueSeverity.INFO]

    def test_broken_references(self, customer_order):
        customer_order["relationships"] += [
            relation("Order.id", "Supplier.id"),
            relation("Order.total", "Customer.id"),
        ]

        issues = validate_data(customer_order)
        errors = [i for i in issues if i.severity == IssueSeverity.ERROR]

        assert len(errors) == 2
        assert errors[0].relationship == 1
        assert "Supplier" in errors[0].message
        assert errors[1].to_dict() == {
            "type": "error",
            "message": "Relationship references non-existent property: Order.total",
            "entity": "Order",
            "relationship": 2,
        }
        assert not validation_summary(issues)["valid"]

    def test_warnings(self, shop):
        shop["entities"]["Tag"] = {"properties": []}
        shop["relationships"].append(relation("LineItem.productId", "Product.id"))

        issues = validate_data(shop)

        assert messages(issues, IssueSeverity.WARNING) == [
            "Entity has no properties",
            "Duplicate relationship from LineItem.productId to Product.id",
            "Orphan entities (no relationships): Tag",
        ]
        assert messages(issues, IssueSeverity.INFO) == ["Self-referencing relationship (entity points to itself)"]
        summary = validation_summary(issues)
        assert summary == {"total": 4, "errors": 0, "warnings": 3, "info": 1, "valid": True}


class TestAnalysis:

    def test_connected_components(self):
        graph = Graph.from_data({
            "entities": {"A": entity("id"), "B": entity("aId"), "C": entity("id"), "D": entity("cId")},
            "relationships": [relation("B.aId", "A.id"), relation("D.cId", "C.id"), relation("D.cId", "C.id")],
        })

        components = find_connected_components(graph)

        assert [c.entities for c in components] == [["A", "B"], ["C", "D"]]
        assert [c.relationship_count for c in components] == [1, 2]
        assert components[0].size == 2

    def test_summary(self, shop):
        shop["entities"]["Tag"] = entity("id")
        summary = summarize_graph(Graph.from_data(shop), top_n=2)

        assert summary.total_entities == 6
        assert summary.total_properties == 14
        assert summary.total_relationships == 6
        assert summary.self_references == 1
        assert summary.connected_components == 2
        assert summary.orphan_count == 1
        assert [e.name for e in summary.most_connected_entities] == ["Order", "Customer"]
        assert summary.to_dict()["most_connected_entities"][0] == {
            "name": "Order",
            "connections": 4,
            "incoming": 2,
            "outgoing": 2,
        }
