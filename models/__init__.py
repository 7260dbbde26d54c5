"""
Creates the DBStorage singleton shared by the API and the services.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
