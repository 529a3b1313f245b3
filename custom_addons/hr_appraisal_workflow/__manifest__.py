# -*- coding: utf-8 -*-
{
    "name": "HR Appraisal Workflow",
    "version": "18.0.1.0.0",
    "summary": "Configurable appraisal procedures: forms, meetings, reviews and approvals",
    "description": """
        HR Appraisal Workflow
        =====================
        Features:
        - Evaluation form builder (text, rating, dropdown, checkbox, date, file fields)
        - Workflow templates with ordered review stages and relative due dates
        - Multi-level managers per employee with assignment-level overrides
        - Bulk assignment of review cycles to employees
        - Form filling, meeting and approval review screens per stage
        - Task list per user with role-aware context
        - Notification feed with read state, reminders and overdue alerts
        - JSON export of submitted form responses
        User Roles:
        - Appraisal Administrator: templates, forms, assignments and configuration
        - Appraisal Manager: reviews, approvals and meetings for their reports
        - Appraisal Employee: own evaluations, meetings and notifications
    """,
    "author": "ADFinance",
    "website": "https://www.adfinance.co",
    "category": "Human Resources/Appraisals",
    "depends": ["base", "web", "mail", "bus", "hr"],
    "data": [
        # Security
        "security/hr_appraisal_workflow_groups.xml",
        "security/ir.model.access.csv",
        # Data
        "data/ir_cron_data.xml",
        "data/hr_appraisal_workflow_data.xml",
        # Views
        "views/evaluation_form_views.xml",
        "views/workflow_template_views.xml",
        "views/workflow_assignment_views.xml",
        "views/notification_views.xml",
        "views/hr_employee_views.xml",
        "views/config_views.xml",
        # Wizards
        "wizards/assign_wizard_views.xml",
        "wizards/manager_override_wizard_views.xml",
        "wizards/approval_review_wizard_views.xml",
        "wizards/form_fill_wizard_views.xml",
        "wizards/meeting_join_wizard_views.xml",
        "wizards/task_views.xml",
        # Menus
        "views/menus.xml",
    ],
    "installable": True,
    "application": True,
    "auto_install": False,
    "license": "LGPL-3",
    "support": "support@adfinance.com",
}
