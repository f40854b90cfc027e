# Import all models here for easy access and to ensure they're loaded before Base.metadata.create_all()

from app.models.alert import PriceAlert, AlertStatus
from app.models.notification import PriceAlertNotification
