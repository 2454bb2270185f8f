from .local_object_storage import LocalObjectStorage, MEDIA_URL_PREFIX

__all__ = ["LocalObjectStorage", "MEDIA_URL_PREFIX"]
