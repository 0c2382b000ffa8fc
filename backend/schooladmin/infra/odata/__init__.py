"""OData wire-format adapters: serializer, fluent builder, active-filter translation."""
