from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.user import User  # noqa: F401
from backend.app.models.contact import Contact  # noqa: F401
from backend.app.models.contact_status_change import ContactStatusChange  # noqa: F401
from backend.app.models.lead_status_change import LeadStatusChange  # noqa: F401
from backend.app.models.property import Property, PropertyStatusChange  # noqa: F401
from backend.app.models.contact_property import ContactProperty  # noqa: F401
from backend.app.models.activity import Activity  # noqa: F401
from backend.app.models.contact_file import ContactFile  # noqa: F401
