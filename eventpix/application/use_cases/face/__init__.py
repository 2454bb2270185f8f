from .name_face import NameFaceUseCase

__all__ = ["NameFaceUseCase"]
