from app.services.catalog import CatalogEntityService


class PropertyService(CatalogEntityService):
    """CRUD for catalog properties, unique by (name, type).

    ``validation_rules`` is stored as given and may be replaced or cleared
    (explicit null) on update.
    """

    entity = "property"
    label = "Property"

    def repository(self):
        return self.uow.properties
