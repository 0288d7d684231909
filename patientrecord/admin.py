from django.contrib import admin

from .models import ProfileField, ProfileFieldData


@admin.register(ProfileField)
class ProfileFieldAdmin(admin.ModelAdmin):
    list_display = ['shortname', 'name', 'sortorder']


admin.site.register(ProfileFieldData)
