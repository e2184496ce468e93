from django.contrib import admin

from courses.models import Lesson, Participant


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ["first_name", "last_name", "email", "registration_date", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["first_name", "last_name", "email"]
    readonly_fields = ["version"]


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ["title", "skill_level", "date_time", "max_participants", "status"]
    list_filter = ["status", "skill_level"]
    search_fields = ["title", "instructor", "location"]
    readonly_fields = ["created_at", "updated_at", "version"]
