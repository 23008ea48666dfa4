import os

from django import forms
from django.utils.translation import gettext_lazy as _

from apps.corecode.imaging import PASSPORT_ASPECT
from .models import Student, StudentBulkUpload, StudentDocument


class StudentForm(forms.ModelForm):
    """Edit a student's profile; status changes go through the workflow"""

    class Meta:
        model = Student
        fields = [
            'full_name', 'gender', 'dob', 'email', 'phone', 'whatsapp_no', 'address',
            'father_name', 'father_qualification', 'mother_name', 'mother_qualification',
            'class_section', 'section', 'fee_category',
            'aadhar_no', 'blood_group', 'identification_mark',
            'transport_route', 'hostel_room',
        ]
        widgets = {
            'dob': forms.DateInput(attrs={'type': 'date'}),
            'address': forms.Textarea(attrs={'rows': 3}),
        }


class StudentAdmissionForm(forms.ModelForm):
    """Details collected when a provisional admission is finalized"""

    class Meta:
        model = Student
        fields = [
            'class_section', 'section', 'whatsapp_no', 'fee_category',
            'father_qualification', 'mother_qualification',
            'aadhar_no', 'blood_group', 'identification_mark',
            'transport_route', 'hostel_room',
        ]

    def clean_class_section(self):
        class_section = self.cleaned_data.get('class_section')
        if not class_section:
            raise forms.ValidationError(_("Class is required to finalize admission"))
        return class_section


class PhotoCropForm(forms.Form):
    """
    Profile photo upload with an optional crop rectangle.

    Crop values are pixels in the rotated image. When given, the crop must
    keep the 1.2 x 1.4 passport frame.
    """

    ASPECT_TOLERANCE = 0.02

    photo = forms.ImageField()
    x = forms.FloatField(required=False, min_value=0)
    y = forms.FloatField(required=False, min_value=0)
    width = forms.FloatField(required=False, min_value=1)
    height = forms.FloatField(required=False, min_value=1)
    rotation = forms.FloatField(required=False, initial=0)
    flip_horizontal = forms.BooleanField(required=False)
    flip_vertical = forms.BooleanField(required=False)

    CROP_FIELDS = ('x', 'y', 'width', 'height')

    def clean(self):
        cleaned_data = super().clean()
        given = [f for f in self.CROP_FIELDS if cleaned_data.get(f) is not None]
        if given and len(given) != len(self.CROP_FIELDS):
            raise forms.ValidationError(_("Crop needs x, y, width and height"))

        if given:
            ratio = cleaned_data['width'] / cleaned_data['height']
            if abs(ratio - PASSPORT_ASPECT) > self.ASPECT_TOLERANCE:
                raise forms.ValidationError(_("Crop must use the passport photo ratio (1.2 x 1.4)"))
        return cleaned_data

    @property
    def crop(self):
        if self.cleaned_data.get('width') is None:
            return None
        return {f: self.cleaned_data[f] for f in self.CROP_FIELDS}

    @property
    def flip(self):
        return {
            'horizontal': self.cleaned_data.get('flip_horizontal', False),
            'vertical': self.cleaned_data.get('flip_vertical', False),
        }


class StudentDocumentForm(forms.ModelForm):
    class Meta:
        model = StudentDocument
        fields = ['document_type', 'file']


class StudentBulkUploadForm(forms.ModelForm):
    class Meta:
        model = StudentBulkUpload
        fields = ['csv_file']

    def clean_csv_file(self):
        csv_file = self.cleaned_data['csv_file']
        _stem, ext = os.path.splitext(csv_file.name)
        if ext.lower() != '.csv':
            raise forms.ValidationError(_("Upload a .csv file"))
        return csv_file
