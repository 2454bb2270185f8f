"""Constants for Face model field names"""


class FaceFields:
    """Field name constants for Face model"""
    ID = "id"
    PHOTO_ID = "photo_id"
    PERSON_ID = "person_id"
    EMBEDDING = "embedding"
    BOX = "box"
    CONFIDENCE = "confidence"
    CREATED_AT = "created_at"
    
    # MongoDB specific
    MONGO_ID = "_id"
