from app.services.catalog import CatalogEntityService


class EventService(CatalogEntityService):
    """CRUD for catalog events, unique by (name, type)"""

    entity = "event"
    label = "Event"

    def repository(self):
        return self.uow.events
