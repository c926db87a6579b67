"""Tests for the tree-sitter C# catalog provider."""

import pytest

from netmermaid.core.catalog import CatalogLoadError, TypeCatalog, TypeKind
from netmermaid.core.catalog.csharp_provider import CSharpCatalogProvider, resolve_base_lists
from netmermaid.core.diagrams import derive_relationships, friendly_name


# =========================================================================
# Sample C# source fixtures
# =========================================================================

ORDER_FILE = '''
using System;
using System.Collections.Generic;
using System.ComponentModel;
using System.ComponentModel.DataAnnotations;

namespace Shop.Database.Entities
{
    public abstract class EntityBase
    {
        public int Id { get; set; }

        public virtual bool Validate()
        {
            return true;
        }
    }

    public class Order : EntityBase, IAuditable
    {
        private decimal _total;

        public string Number { get; set; }
        public Customer? Customer { get; set; }
        public ICollection<OrderLine> Lines { get; set; } = new List<OrderLine>();
        public OrderStatus Status { get; private set; }
        public DateTime? ShippedAt { get; set; }
        internal string Note { get; set; }
        public static int Count { get; set; }

        public void Close(string reason)
        {
        }

        public override bool Validate() => Lines.Count > 0;

        private decimal Recalculate(IEnumerable<OrderLine> lines, bool force)
        {
            return _total;
        }

        public static Order Create() => new Order();
    }

    public class OrderLine
    {
        public Order Order { get; set; }
        public int Quantity { get; set; }
    }

    public enum OrderStatus
    {
        [Description("Waiting for payment")]
        Open,
        Closed = 5,
        [Display(Name = "Sent to customer")]
        Shipped
    }

    public interface IAuditable
    {
        DateTime CreatedAt { get; }
        void Touch();
    }
}
'''

CUSTOMER_FILE = '''
namespace Shop.Database.Entities;

public partial class Customer
{
    public string Name { get; set; }
}

public record Address(string Street, string City);
'''

CUSTOMER_ORDERS_FILE = '''
using System;

namespace Shop.Database.Entities
{
    public partial class Customer : IComparable<Customer>
    {
        public ICollection<Order> Orders { get; set; }

        public int CompareTo(Customer other) => 0;
    }
}
'''

SERVICES_FILE = '''
namespace Shop.Services
{
    public class OrderService
    {
        public void Ship(Order order) { }
    }
}
'''


@pytest.fixture
def source_root(tmp_path):
    (tmp_path / "a_order.cs").write_text(ORDER_FILE)
    (tmp_path / "b_customer.cs").write_text(CUSTOMER_FILE)
    (tmp_path / "c_customer_orders.cs").write_text(CUSTOMER_ORDERS_FILE)
    services = tmp_path / "services"
    services.mkdir()
    (services / "OrderService.cs").write_text(SERVICES_FILE)
    # Build output is never parsed
    obj = tmp_path / "obj"
    obj.mkdir()
    (obj / "Generated.cs").write_text("namespace Shop.Database.Entities { public class Generated { } }")
    return tmp_path


@pytest.fixture
def types(source_root):
    return {t.name: t for t in CSharpCatalogProvider(str(source_root)).load_types()}


# =========================================================================
# Tests: Type discovery
# =========================================================================

class TestTypeDiscovery:
    def test_types_found_in_file_order(self, source_root):
        names = [t.name for t in CSharpCatalogProvider(str(source_root)).load_types()]
        assert names == [
            "EntityBase", "Order", "OrderLine", "OrderStatus", "IAuditable",
            "Customer", "Address", "OrderService",
        ]

    def test_kinds(self, types):
        assert types["Order"].kind is TypeKind.CLASS
        assert types["OrderStatus"].kind is TypeKind.ENUM
        assert types["IAuditable"].kind is TypeKind.INTERFACE
        assert types["Address"].kind is TypeKind.CLASS

    def test_namespaces(self, types):
        assert types["Order"].namespace == "Shop.Database.Entities"
        assert types["Customer"].namespace == "Shop.Database.Entities"
        assert types["OrderService"].namespace == "Shop.Services"

    def test_build_directories_skipped(self, types):
        assert "Generated" not in types

    def test_missing_root(self, tmp_path):
        with pytest.raises(CatalogLoadError):
            CSharpCatalogProvider(str(tmp_path / "missing")).load_types()


# =========================================================================
# Tests: Members
# =========================================================================

class TestMembers:
    def test_instance_properties_in_order(self, types):
        names = [m.name for m in types["Order"].members]
        assert names == ["Number", "Customer", "Lines", "Status", "ShippedAt", "Note"]

    def test_visibility(self, types):
        members = {m.name: m for m in types["Order"].members}
        assert members["Number"].is_public
        assert members["Status"].is_public  # private setter, public getter
        assert not members["Note"].is_public

    def test_member_types(self, types):
        members = {m.name: m for m in types["Order"].members}
        assert friendly_name(members["Lines"].type_ref) == "ICollection~OrderLine~"
        assert friendly_name(members["ShippedAt"].type_ref) == "Nullable~DateTime~"
        assert members["Customer"].type_ref.name == "Customer"

    def test_fields_when_requested(self, source_root):
        provider = CSharpCatalogProvider(str(source_root), include_fields=True)
        order = next(t for t in provider.load_types() if t.name == "Order")
        total = next(m for m in order.members if m.name == "_total")
        assert total.type_ref.name == "decimal"
        assert not total.is_public

    def test_interface_members_are_public(self, types):
        created = types["IAuditable"].members[0]
        assert created.name == "CreatedAt"
        assert created.is_public

    def test_positional_record_parameters(self, types):
        assert [(m.name, m.type_ref.name) for m in types["Address"].members] == [
            ("Street", "string"),
            ("City", "string"),
        ]


# =========================================================================
# Tests: Methods
# =========================================================================

class TestMethods:
    def test_instance_methods_only(self, types):
        assert [m.name for m in types["Order"].methods] == ["Close", "Validate", "Recalculate"]

    def test_signature(self, types):
        methods = {m.name: m for m in types["Order"].methods}
        recalc = methods["Recalculate"]
        assert not recalc.is_public
        assert recalc.return_type.name == "decimal"
        assert [(friendly_name(p.type_ref), p.name) for p in recalc.parameters] == [
            ("IEnumerable~OrderLine~", "lines"),
            ("bool", "force"),
        ]
        assert methods["Validate"].return_type.name == "bool"
        assert methods["Close"].return_type.name == "void"

    def test_interface_methods_are_public(self, types):
        touch = types["IAuditable"].methods[0]
        assert touch.name == "Touch"
        assert touch.is_public


# =========================================================================
# Tests: Enums
# =========================================================================

class TestEnums:
    def test_values_and_descriptions(self, types):
        values = [(v.name, v.description) for v in types["OrderStatus"].enum_values]
        assert values == [
            ("Open", "Waiting for payment"),
            ("Closed", None),
            ("Shipped", "Sent to customer"),
        ]


# =========================================================================
# Tests: Inheritance and partial types
# =========================================================================

class TestInheritance:
    def test_base_and_interfaces(self, types):
        order = types["Order"]
        assert order.base_type.name == "EntityBase"
        assert [i.name for i in order.implemented_interfaces] == ["IAuditable"]

    def test_no_base(self, types):
        assert types["EntityBase"].base_type is None

    def test_partial_declarations_merged(self, types):
        customer = types["Customer"]
        assert [m.name for m in customer.members] == ["Name", "Orders"]
        assert [m.name for m in customer.methods] == ["CompareTo"]
        assert friendly_name(customer.implemented_interfaces[0]) == "IComparable~Customer~"
        assert customer.base_type is None

    def test_known_kinds_override_naming_heuristic(self):
        provider = CSharpCatalogProvider(".")
        declared = provider.parse_source('''
namespace N
{
    public class Item { }
    public interface Trackable { }
    public class Widget : Item, Trackable { }
    public class Gadget : Trackable { }
}
''')
        resolve_base_lists(declared)
        by_name = {d.descriptor.name: d.descriptor for d in declared}
        assert by_name["Widget"].base_type.name == "Item"
        assert [i.name for i in by_name["Widget"].implemented_interfaces] == ["Trackable"]
        assert by_name["Gadget"].base_type is None

    def test_unknown_names_use_interface_convention(self):
        provider = CSharpCatalogProvider(".")
        declared = provider.parse_source("namespace N { public class Repo : DbContext, IDisposable { } }")
        resolve_base_lists(declared)
        repo = declared[0].descriptor
        assert repo.base_type.name == "DbContext"
        assert [i.name for i in repo.implemented_interfaces] == ["IDisposable"]

    def test_struct_bases_are_interfaces(self):
        provider = CSharpCatalogProvider(".")
        declared = provider.parse_source("namespace N { public struct Money : Comparable { } }")
        resolve_base_lists(declared)
        money = declared[0].descriptor
        assert money.base_type is None
        assert [i.name for i in money.implemented_interfaces] == ["Comparable"]


# =========================================================================
# Tests: Nullable enums and structs
# =========================================================================

NULLABLE_FILE = '''
namespace Shop.Database.Entities
{
    public enum OrderStatus { Open, Closed }

    public struct Money
    {
        public decimal Amount { get; set; }
    }

    public class Order
    {
        public OrderStatus? Status { get; set; }
        public Money? Discount { get; set; }
        public List<OrderStatus?> History { get; set; }
        public Customer? Customer { get; set; }

        public Money? Total(OrderStatus? status) => null;
    }

    public class Customer { }
}
'''


class TestNullableValueTypes:
    @pytest.fixture
    def catalog(self, tmp_path):
        (tmp_path / "Order.cs").write_text(NULLABLE_FILE)
        types = CSharpCatalogProvider(str(tmp_path)).load_types()
        return TypeCatalog(types=types)

    def test_declared_enums_and_structs_are_wrapped(self, catalog):
        members = {m.name: m for m in catalog.get("Order").members}
        assert friendly_name(members["Status"].type_ref) == "Nullable~OrderStatus~"
        assert friendly_name(members["Discount"].type_ref) == "Nullable~Money~"
        assert friendly_name(members["History"].type_ref) == "List~Nullable~OrderStatus~~"

    def test_nullable_reference_annotation_is_dropped(self, catalog):
        members = {m.name: m for m in catalog.get("Order").members}
        assert friendly_name(members["Customer"].type_ref) == "Customer"

    def test_method_signatures_are_wrapped(self, catalog):
        total = catalog.get("Order").methods[0]
        assert friendly_name(total.return_type) == "Nullable~Money~"
        assert friendly_name(total.parameters[0].type_ref) == "Nullable~OrderStatus~"

    def test_nullable_value_members_draw_no_edge(self, catalog):
        assert derive_relationships(catalog) == ["Order --> Customer : has"]


# =========================================================================
# Tests: Nested types
# =========================================================================

NESTED_FILE = '''
namespace Shop.Database.Entities
{
    public class Order
    {
        public class Note { public string Text { get; set; } }
    }

    public class Invoice
    {
        public class Note { public int Number { get; set; } }
    }
}
'''

PARTIAL_NESTED_FILES = (
    'namespace N { public partial class Outer { public partial class Inner { public int A { get; set; } } } }',
    'namespace N { public partial class Outer { public partial class Inner { public int B { get; set; } } } }',
)


class TestNestedTypes:
    def test_same_name_in_different_outer_types_not_merged(self, tmp_path):
        (tmp_path / "Nested.cs").write_text(NESTED_FILE)
        notes = [t for t in CSharpCatalogProvider(str(tmp_path)).load_types() if t.name == "Note"]
        assert [[m.name for m in n.members] for n in notes] == [["Text"], ["Number"]]
        assert all(n.namespace == "Shop.Database.Entities" for n in notes)

    def test_nested_partials_are_merged(self, tmp_path):
        for index, text in enumerate(PARTIAL_NESTED_FILES):
            (tmp_path / f"part{index}.cs").write_text(text)
        inner = [t for t in CSharpCatalogProvider(str(tmp_path)).load_types() if t.name == "Inner"]
        assert len(inner) == 1
        assert [m.name for m in inner[0].members] == ["A", "B"]

    def test_declaring_type_recorded(self):
        declared = CSharpCatalogProvider(".").parse_source(NESTED_FILE)
        assert [(d.descriptor.name, d.key) for d in declared] == [
            ("Order", "Shop.Database.Entities.Order"),
            ("Note", "Shop.Database.Entities.Order.Note"),
            ("Invoice", "Shop.Database.Entities.Invoice"),
            ("Note", "Shop.Database.Entities.Invoice.Note"),
        ]
