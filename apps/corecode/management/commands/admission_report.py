import csv

from django.core.management.base import BaseCommand

from apps.admissions.models import AdmissionEnquiry, RegistrationStatus, StudentRegistration
from apps.admissions.workflow import coerce_enquiry_status
from apps.students.models import Student


class Command(BaseCommand):
    help = 'Summarise the admission pipeline and list provisional students'

    def add_arguments(self, parser):
        parser.add_argument(
            '--format',
            choices=['console', 'csv'],
            default='console',
            help='Output format'
        )
        parser.add_argument(
            '--class',
            dest='class_section',
            help='Filter students by class'
        )

    def handle(self, *args, **options):
        students = Student.get_provisional_students()
        if options['class_section']:
            students = students.filter(class_section=options['class_section'])

        enquiry_counts = {}
        for status in AdmissionEnquiry.active.values_list('response_status', flat=True):
            label = coerce_enquiry_status(status).label
            enquiry_counts[label] = enquiry_counts.get(label, 0) + 1

        registrations = StudentRegistration.objects.all()
        registration_counts = {
            status.label: registrations.filter(status=status).count()
            for status in RegistrationStatus
        }

        report_data = [
            {
                'admission_no': student.admission_no,
                'name': student.full_name,
                'class': student.class_section or 'None',
                'phone': student.phone or '-',
                'created': student.created_at.date().isoformat(),
            }
            for student in students
        ]

        if options['format'] == 'csv':
            self.output_csv(report_data)
        else:
            self.output_console(report_data, enquiry_counts, registration_counts)

    def output_console(self, data, enquiry_counts, registration_counts):
        self.stdout.write(self.style.SUCCESS('=' * 80))
        self.stdout.write(self.style.SUCCESS('ADMISSION PIPELINE REPORT'))
        self.stdout.write(self.style.SUCCESS('=' * 80))

        self.stdout.write("\nEnquiries:")
        for label, count in enquiry_counts.items():
            self.stdout.write(f"   {label}: {count}")

        self.stdout.write("\nRegistrations:")
        for label, count in registration_counts.items():
            self.stdout.write(f"   {label}: {count}")

        self.stdout.write(f"\nProvisional Students: {self.style.WARNING(str(len(data)))}")
        self.stdout.write(f"{'Admission No':<16} {'Name':<30} {'Class':<15} {'Phone':<12} {'Created':<10}")
        self.stdout.write('-' * 90)

        for item in data:
            self.stdout.write(f"{item['admission_no']:<16} {item['name']:<30} "
                              f"{item['class']:<15} {item['phone']:<12} {item['created']:<10}")

    def output_csv(self, data):
        writer = csv.writer(self.stdout)
        writer.writerow(['Admission No', 'Name', 'Class', 'Phone', 'Created'])

        for item in data:
            writer.writerow([
                item['admission_no'],
                item['name'],
                item['class'],
                item['phone'],
                item['created'],
            ])
