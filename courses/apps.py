from django.apps import AppConfig
from django.conf import settings


class CoursesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "courses"
    verbose_name = "Cookie courses"

    def ready(self) -> None:
        from courses.services import CourseOptions, CourseServices
        from courses.stores.django_store import DjangoLessonStore, DjangoParticipantStore

        self.services = CourseServices.build(
            DjangoParticipantStore(),
            DjangoLessonStore(),
            options=CourseOptions.from_mapping(getattr(settings, "COURSES", {})),
        )
