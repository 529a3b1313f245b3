# -*- coding: utf-8 -*-
from odoo import fields
from odoo.tests.common import TransactionCase


class AppraisalWorkflowCase(TransactionCase):
    """Employees with a two level manager hierarchy and a four stage procedure"""

    def setUp(self):
        super().setUp()
        self.today = fields.Date.today()
        employee_group = self.env.ref('hr_appraisal_workflow.group_appraisal_employee')
        manager_group = self.env.ref('hr_appraisal_workflow.group_appraisal_manager')

        self.alice_user = self.env['res.users'].create({
            'name': 'Alice Uwase',
            'login': 'alice.appraisal',
            'email': 'alice@example.com',
            'groups_id': [(6, 0, [employee_group.id])],
        })
        self.bob_user = self.env['res.users'].create({
            'name': 'Bob Mugisha',
            'login': 'bob.appraisal',
            'email': 'bob@example.com',
            'groups_id': [(6, 0, [manager_group.id])],
        })
        self.carol_user = self.env['res.users'].create({
            'name': 'Carol Ingabire',
            'login': 'carol.appraisal',
            'email': 'carol@example.com',
            'groups_id': [(6, 0, [manager_group.id])],
        })

        self.department = self.env['hr.department'].create({'name': 'Engineering'})
        self.job = self.env['hr.job'].create({'name': 'Software Engineer'})

        self.alice = self.env['hr.employee'].create({
            'name': 'Alice Uwase',
            'user_id': self.alice_user.id,
            'job_id': self.job.id,
            'department_id': self.department.id,
        })
        self.bob = self.env['hr.employee'].create({'name': 'Bob Mugisha', 'user_id': self.bob_user.id})
        self.carol = self.env['hr.employee'].create({'name': 'Carol Ingabire', 'user_id': self.carol_user.id})

        ManagerLevel = self.env['hr.appraisal.manager.level']
        ManagerLevel.create({'employee_id': self.alice.id, 'level': 1, 'manager_employee_id': self.bob.id})
        ManagerLevel.create({'employee_id': self.alice.id, 'level': 2, 'manager_employee_id': self.carol.id})

        self.form = self.env['hr.appraisal.evaluation.form'].create({
            'name': 'Quarterly Self Review',
            'field_ids': [
                (0, 0, {'key': 'rating', 'label': 'Overall Rating', 'field_type': 'rating',
                        'required': True, 'min_value': 1, 'max_value': 5, 'sequence': 1}),
                (0, 0, {'key': 'achievements', 'label': 'Achievements', 'field_type': 'textarea',
                        'required': True, 'sequence': 2}),
                (0, 0, {'key': 'readiness', 'label': 'Promotion Readiness', 'field_type': 'dropdown',
                        'options': 'Ready Now\nNot Ready', 'sequence': 3}),
                (0, 0, {'key': 'skills', 'label': 'Skills Developed', 'field_type': 'checkbox',
                        'options': 'Python\nLeadership\nCommunication', 'sequence': 4}),
                (0, 0, {'key': 'review_date', 'label': 'Review Date', 'field_type': 'date', 'sequence': 5}),
            ],
        })

        self.template = self.env['hr.appraisal.workflow.template'].create({
            'name': 'Engineering Quarterly Review',
            'interval_type': 'quarterly',
            'manager_levels': '1,2',
            'form_reminder_days': 7,
            'meeting_reminder_days': 7,
            'stage_ids': [
                (0, 0, {'name': 'Self Evaluation', 'sequence': 1, 'stage_type': 'evaluation',
                        'attendees': 'employee', 'evaluation_form_id': self.form.id,
                        'due_date_type': 'before_interval', 'due_date_offset': 1}),
                (0, 0, {'name': 'Manager Review', 'sequence': 2, 'stage_type': 'review',
                        'attendees': 'manager_level_1', 'manager_level': 1,
                        'evaluation_form_id': self.form.id, 'due_date_type': 'on_interval'}),
                (0, 0, {'name': 'Feedback Meeting', 'sequence': 3, 'stage_type': 'meeting',
                        'attendees': 'employee,manager_level_1', 'manager_level': 1,
                        'due_date_type': 'after_interval', 'due_date_offset': 1}),
                (0, 0, {'name': 'Final Approval', 'sequence': 4, 'stage_type': 'approval',
                        'attendees': 'manager_level_2', 'manager_level': 2,
                        'due_date_type': 'after_interval', 'due_date_offset': 2}),
            ],
            'meeting_frequency_ids': [(0, 0, {'manager_level': 1, 'frequency_type': 'biweekly'})],
        })
        self.self_eval, self.review, self.meeting_stage, self.approval = self.template.stage_ids.sorted('sequence')

    def _create_assignment(self, start_date=None, employee=None):
        start_date = start_date or self.today
        return self.env['hr.appraisal.workflow.assignment'].create({
            'template_id': self.template.id,
            'employee_id': (employee or self.alice).id,
            'start_date': start_date,
            'end_date': self.template.compute_end_date(start_date),
        })

    def _valid_answers(self):
        return {
            'rating': 4,
            'achievements': 'Shipped the payroll integration',
            'readiness': 'Ready Now',
            'skills': ['Python', 'Leadership'],
            'review_date': '2026-03-31',
        }
