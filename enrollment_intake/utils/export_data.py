# utils/export_data.py
from datetime import datetime

import pandas as pd

EXPORT_COLUMNS = [
    'Application ID', 'First Name', 'Last Name', 'Email', 'Phone', 'Date of Birth',
    'Course', 'Address', 'City', 'ZIP Code', 'Emergency Contact', 'Emergency Phone',
    'Status', 'Submitted At', 'Processed At'
]


def _timestamp(value):
    return value.isoformat() if value else ''


def enrollments_to_frame(enrollments):
    """
    Tabulate applications for export. ID numbers are left out of exports.

    Args:
        enrollments: Iterable of StudentEnrollment rows

    Returns:
        pandas.DataFrame: One row per application
    """
    data = []
    for enrollment in enrollments:
        data.append({
            'Application ID': enrollment.application_id,
            'First Name': enrollment.first_name,
            'Last Name': enrollment.last_name,
            'Email': enrollment.email,
            'Phone': enrollment.phone,
            'Date of Birth': enrollment.date_of_birth.isoformat() if enrollment.date_of_birth else '',
            'Course': enrollment.course,
            'Address': enrollment.address,
            'City': enrollment.city,
            'ZIP Code': enrollment.zip_code,
            'Emergency Contact': enrollment.emergency_contact,
            'Emergency Phone': enrollment.emergency_phone,
            'Status': enrollment.status,
            'Submitted At': _timestamp(enrollment.created_at),
            'Processed At': _timestamp(enrollment.processed_at)
        })

    return pd.DataFrame(data, columns=EXPORT_COLUMNS)


def export_enrollments_to_csv(enrollments):
    """
    Export applications as CSV text.

    Returns:
        tuple: (csv_text, filename)
    """
    df = enrollments_to_frame(enrollments)

    # Generate filename with timestamp
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    filename = f'enrollments_export_{timestamp}.csv'

    return df.to_csv(index=False), filename
