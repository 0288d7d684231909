# patientform_platform/patientform/serializers.py
from rest_framework import serializers

from courses.permissions import has_capability

from .exceptions import UnknownItemType
from .items import get_item_handler
from .models import PatientForm, Item, CompletedTmp, ValueTmp, Completed, Value

# --- Patient forms ---

class PatientFormSerializer(serializers.ModelSerializer):
    """Full settings of a form, used by teachers who can edit it."""
    class Meta:
        model = PatientForm
        fields = [
            'id', 'course', 'name', 'intro', 'anonymous', 'multiple_submit',
            'autonumbering', 'publish_stats', 'group_mode', 'page_after_submit',
            'site_after_submit', 'completion_submit', 'timeopen', 'timeclose',
            'timemodified'
        ]
        read_only_fields = ['timemodified']

    def validate(self, attrs):
        timeopen = attrs.get('timeopen', getattr(self.instance, 'timeopen', None))
        timeclose = attrs.get('timeclose', getattr(self.instance, 'timeclose', None))
        if timeopen and timeclose and timeclose < timeopen:
            raise serializers.ValidationError({'timeclose': "The closing time must be after the opening time."})
        return attrs


class PatientFormSummarySerializer(PatientFormSerializer):
    """What participants see. Settings that only matter to editors are left out for them."""
    EDITOR_ONLY_FIELDS = [
        'multiple_submit', 'page_after_submit', 'site_after_submit',
        'publish_stats', 'completion_submit', 'group_mode'
    ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if not has_capability(user, 'patientform:edititems', instance.course):
            for field in self.EDITOR_ONLY_FIELDS:
                data.pop(field, None)
        return data


# --- Exporters ---

class ItemExporter(serializers.ModelSerializer):
    itemnumber = serializers.SerializerMethodField()
    otherdata = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = [
            'id', 'patientform', 'name', 'label', 'presentation', 'typ',
            'hasvalue', 'position', 'required', 'dependitem', 'dependvalue',
            'options', 'itemnumber', 'otherdata'
        ]

    def get_itemnumber(self, obj):
        return getattr(obj, 'itemnr', None)

    def get_otherdata(self, obj):
        return get_item_handler(obj.typ).get_data_for_external(obj)


class CompletedTmpExporter(serializers.ModelSerializer):
    userid = serializers.IntegerField(source='user_id', read_only=True)
    courseid = serializers.IntegerField(source='course_id', read_only=True)

    class Meta:
        model = CompletedTmp
        fields = ['id', 'patientform', 'userid', 'courseid', 'anonymous_response', 'timemodified']


class ValueTmpExporter(serializers.ModelSerializer):
    courseid = serializers.IntegerField(source='course_id', read_only=True)

    class Meta:
        model = ValueTmp
        fields = ['id', 'courseid', 'item', 'completed', 'value']


class CompletedExporter(serializers.ModelSerializer):
    userid = serializers.IntegerField(source='user_id', read_only=True, allow_null=True)
    courseid = serializers.IntegerField(source='course_id', read_only=True)

    class Meta:
        model = Completed
        fields = ['id', 'patientform', 'userid', 'courseid', 'timemodified', 'random_response', 'anonymous_response']


class ValueExporter(serializers.ModelSerializer):
    courseid = serializers.IntegerField(source='course_id', read_only=True)

    class Meta:
        model = Value
        fields = ['id', 'courseid', 'item', 'completed', 'value']


# --- Request payloads ---

class ResponseSerializer(serializers.Serializer):
    name = serializers.CharField()
    value = serializers.CharField(allow_blank=True, required=False, default='')


class ProcessPageSerializer(serializers.Serializer):
    """
    Answers of one page: [{"name": "textfield_4", "value": "hi"}, ...]
    Checkbox style answers use "multichoice_5[1]" names, one pair per ticked option.
    """
    responses = ResponseSerializer(many=True, required=False, default=list)
    goprevious = serializers.BooleanField(required=False, default=False)


class ItemCreateSerializer(serializers.Serializer):
    patientform = serializers.PrimaryKeyRelatedField(queryset=PatientForm.objects.all())
    typ = serializers.CharField()

    def validate_typ(self, value):
        try:
            get_item_handler(value)
        except UnknownItemType:
            raise serializers.ValidationError(f"Unknown item type: {value}")
        return value
