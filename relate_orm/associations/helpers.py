from ..errors import NamingCollisionError


def add_foreign_key_constraints(new_attribute, target, source, options, target_column):
    """Fill references and referential actions of an injected foreign key.

    Only a key pointing at the target's single primary key column gets a
    database constraint; composite and non primary target keys stay
    unconstrained since SQLite requires the referenced columns to be unique.
    """
    if options.get("constraints") is False:
        return
    if target_column != target._fields[target._primary_key].column_name:
        return

    new_attribute.references = (target._table_name, target_column)
    if new_attribute.on_delete is None:
        new_attribute.on_delete = options.get("on_delete") or (
            "SET NULL" if new_attribute.nullable else "NO ACTION"
        )
    if new_attribute.on_update is None:
        new_attribute.on_update = options.get("on_update") or "CASCADE"


def check_naming_collision(association):
    source = association.source
    if association.alias in source._fields:
        raise NamingCollisionError(
            f"Naming collision between attribute '{association.alias}' and association "
            f"'{association.alias}' on model {source.__name__}. To remedy this, change "
            f"either foreign_key or alias in your association definition",
            {"entity": source.__name__, "alias": association.alias},
        )

    other = source._associations.get(association.alias)
    if other is not None and other is not association:
        raise NamingCollisionError(
            f"Association '{association.alias}' is already defined on model {source.__name__}",
            {"entity": source.__name__, "alias": association.alias},
        )

    for accessor in association.accessors.values():
        registered = source._accessors.get(accessor)
        if registered is not None and registered[0] is not association:
            raise NamingCollisionError(
                f"Accessor '{accessor}' is already registered on model {source.__name__}",
                {"entity": source.__name__, "accessor": accessor},
            )
        if accessor in source._fields or hasattr(source, accessor):
            raise NamingCollisionError(
                f"Accessor '{accessor}' shadows an attribute of model {source.__name__}",
                {"entity": source.__name__, "accessor": accessor},
            )


def mixin_methods(association, entity_cls, methods):
    """Register accessor name -> (association, operation) on entity_cls.

    Registering again under the same accessor name replaces the entry.
    """
    for method in methods:
        entity_cls._accessors[association.accessors[method]] = (association, method)
