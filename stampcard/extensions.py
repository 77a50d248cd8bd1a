"""
Flask extensions shared by the Stampcard app.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Database for businesses, customers, visits and rewards
db = SQLAlchemy()

# Schema migrations (flask db ...)
migrate = Migrate()
