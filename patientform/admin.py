from django.contrib import admin

from .models import PatientForm, Item, Completed, CompletedTmp


class ItemInline(admin.TabularInline):
    model = Item
    fk_name = 'patientform'
    fields = ['position', 'typ', 'name', 'label', 'required', 'hasvalue']
    extra = 0


@admin.register(PatientForm)
class PatientFormAdmin(admin.ModelAdmin):
    list_display = ['name', 'course', 'anonymous', 'multiple_submit', 'timeopen', 'timeclose']
    list_filter = ['anonymous', 'group_mode']
    search_fields = ['name', 'course__fullname']
    inlines = [ItemInline]


admin.site.register(Completed)
admin.site.register(CompletedTmp)
