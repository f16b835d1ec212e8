from rest_framework import serializers


class UploadSerializer(serializers.Serializer):
    file = serializers.FileField()


class AnalyzeRequestSerializer(serializers.Serializer):
    file1 = serializers.FileField()
    file2 = serializers.FileField()
    time_field1 = serializers.CharField()
    value_field1 = serializers.CharField()
    time_field2 = serializers.CharField()
    value_field2 = serializers.CharField()
    name1 = serializers.CharField(required=False)
    name2 = serializers.CharField(required=False)
