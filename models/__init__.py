from .models import (
    User, Course, CourseRequest, StudyCircle, StudyCircleMember, Message, ChatbotHistory,
    UserRoleEnum, AvailabilityEnum, SharingTypeEnum, DifficultyLevelEnum,
    RequestStatusEnum, MessageTypeEnum, ACTIVE_REQUEST_STATUSES
)
