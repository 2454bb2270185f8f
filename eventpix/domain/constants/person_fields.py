"""Constants for Person model field names"""


class PersonFields:
    """Field name constants for Person model"""
    ID = "id"
    NAME = "name"
    NORMALIZED_NAME = "normalized_name"
    NAME_KEY = "name_key"
    PHONE_NUMBER = "phone_number"
    SEAT_NUMBER = "seat_number"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    
    # MongoDB specific
    MONGO_ID = "_id"
