"""Constants for Photo model field names"""


class PhotoFields:
    """Field name constants for Photo model"""
    ID = "id"
    URL = "url"
    ORIGINAL_URL = "original_url"
    STATUS = "status"
    WIDTH = "width"
    HEIGHT = "height"
    CREATED_AT = "created_at"
    
    # MongoDB specific
    MONGO_ID = "_id"
