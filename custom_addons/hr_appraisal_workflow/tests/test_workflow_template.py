# -*- coding: utf-8 -*-
from datetime import date, timedelta

from odoo.exceptions import ValidationError

from .common import AppraisalWorkflowCase


class TestWorkflowTemplate(AppraisalWorkflowCase):

    def setUp(self):
        super().setUp()
        self.start = date(2026, 1, 15)
        self.end = date(2026, 4, 15)

    def test_stage_due_dates(self):
        """Due dates follow the stage's due date type and offset in weeks"""
        Stage = self.env['hr.appraisal.workflow.stage']

        def stage(due_type, offset=0, unit=False):
            return Stage.new({
                'template_id': self.template.id,
                'name': 'Draft Stage',
                'due_date_type': due_type,
                'due_date_offset': offset,
                'due_date_unit': unit,
            })

        self.assertEqual(stage('on_interval').compute_due_date(self.start, self.end), self.start)
        self.assertEqual(stage('before_interval', 2).compute_due_date(self.start), date(2026, 1, 1))
        self.assertEqual(stage('before_interval', 0).compute_due_date(self.start), self.start)
        self.assertEqual(stage('after_interval', 1).compute_due_date(self.start, self.end), date(2026, 1, 22))
        self.assertEqual(stage('after_interval', 0).compute_due_date(self.start, self.end), self.end)
        self.assertEqual(stage('after_interval', 0).compute_due_date(self.start), self.start)
        self.assertEqual(stage('custom', 10, 'days').compute_due_date(self.start), date(2026, 1, 25))
        self.assertEqual(stage('custom', 2, 'weeks').compute_due_date(self.start), date(2026, 1, 29))
        self.assertEqual(stage('custom', 2, 'months').compute_due_date(self.start), date(2026, 3, 15))
        self.assertEqual(stage('custom', 3).compute_due_date(self.start), self.start)
        self.assertIsNone(stage(False).compute_due_date(self.start))

    def test_stage_offset_days(self):
        self.assertEqual(self.self_eval.get_offset_days(), -7)
        self.assertEqual(self.review.get_offset_days(), 0)
        self.assertEqual(self.meeting_stage.get_offset_days(), 7)
        self.assertEqual(self.approval.get_offset_days(), 14)

    def test_attendee_tokens(self):
        self.assertEqual(self.meeting_stage.get_attendee_tokens(), ['employee', 'manager_level_1'])
        self.assertEqual(self.meeting_stage.get_manager_levels(), [1])
        self.assertEqual(self.self_eval.get_manager_levels(), [])

    def test_interval_days(self):
        self.assertEqual(self.template.get_interval_days(), 90)
        for interval_type, days in [('daily', 1), ('weekly', 7), ('biweekly', 14), ('monthly', 30),
                                    ('biannually', 180), ('annually', 365)]:
            self.template.interval_type = interval_type
            self.assertEqual(self.template.get_interval_days(), days, interval_type)

        self.template.write({'interval_type': 'custom', 'interval_value': 3, 'interval_unit': 'weeks'})
        self.assertEqual(self.template.get_interval_days(), 21)

        config = self.env['hr.appraisal.workflow.config'].get_config()
        config.month_days = 31
        self.template.write({'interval_value': 2, 'interval_unit': 'months'})
        self.assertEqual(self.template.get_interval_days(), 62)

    def test_compute_end_date(self):
        """Interval days plus the furthest stage scheduled after the appraisal date"""
        self.assertEqual(self.template.compute_end_date(self.start), self.start + timedelta(days=90 + 14))

        self.approval.due_date_offset = 0
        self.assertEqual(self.template.compute_end_date(self.start), self.start + timedelta(days=90 + 7))

    def test_applicability(self):
        """Empty position and department lists apply to everyone; otherwise either may match"""
        self.assertTrue(self.template.is_applicable_to(self.alice))

        other_job = self.env['hr.job'].create({'name': 'Accountant'})
        other_department = self.env['hr.department'].create({'name': 'Finance'})
        self.template.write({
            'job_ids': [(6, 0, [other_job.id])],
            'department_ids': [(6, 0, [self.department.id])],
        })
        self.assertTrue(self.template.is_applicable_to(self.alice))

        self.template.department_ids = [(6, 0, [other_department.id])]
        self.assertFalse(self.template.is_applicable_to(self.alice))
        self.assertNotIn(self.template, self.env['hr.appraisal.workflow.template'].get_available_templates(self.alice))

        self.template.job_ids = [(6, 0, [self.job.id])]
        self.assertIn(self.template, self.env['hr.appraisal.workflow.template'].get_available_templates(self.alice))

    def test_meeting_frequency_next_date(self):
        frequency = self.template.meeting_frequency_ids
        self.assertEqual(frequency.compute_next_meeting_date(self.start), self.start + timedelta(days=14))

        frequency.write({'frequency_type': 'custom', 'frequency_value': 2, 'frequency_unit': 'months'})
        self.assertEqual(frequency.compute_next_meeting_date(self.start), self.start + timedelta(days=60))

        frequency.write({'frequency_value': 0})
        self.assertEqual(frequency.compute_next_meeting_date(self.start), self.start + timedelta(days=30))

    def test_template_constraints(self):
        with self.assertRaises(ValidationError):
            self.self_eval.due_date_offset = -1
        with self.assertRaises(ValidationError):
            self.template.write({'interval_type': 'custom', 'interval_value': 0})
        with self.assertRaises(ValidationError):
            self.meeting_stage.attendees = 'employee,director'
        with self.assertRaisesRegex(ValidationError, 'Please select at least one attendee'):
            self.self_eval.attendees = False
        with self.assertRaisesRegex(ValidationError, 'Please select at least one attendee'):
            self.self_eval.attendees = ' , '
        with self.assertRaises(ValidationError):
            self.meeting_stage.required_stage_ids = [(6, 0, [self.meeting_stage.id])]

    def test_prerequisites_from_other_template(self):
        other = self.template.copy({'name': 'Copy'})
        with self.assertRaises(ValidationError):
            self.meeting_stage.required_stage_ids = [(6, 0, [other.stage_ids[0].id])]

    def test_default_templates(self):
        """Standard procedures are seeded once"""
        Template = self.env['hr.appraisal.workflow.template']
        Template.create_default_templates()
        self.assertFalse(Template.create_default_templates())

        engineer = Template.search([('name', '=', 'Software Engineer Quarterly Appraisal')])
        self.assertEqual(len(engineer), 1)
        stages = engineer.stage_ids.sorted('sequence')
        self.assertEqual(len(stages), 5)
        self.assertEqual(stages[2].required_stage_ids, stages[0] | stages[1])
        self.assertEqual(stages[0].evaluation_form_id.name, 'Employee Self-Evaluation Form')

        one_on_one = Template.search([('name', '=', '1-on-1 Meeting Procedure')])
        self.assertEqual(one_on_one.interval_type, 'biweekly')
        self.assertEqual(one_on_one.meeting_frequency_ids.manager_level, 1)

        executive = Template.search([('name', '=', 'Senior Executive Performance Review')])
        self.assertEqual(len(executive.stage_ids), 7)
        self.assertEqual(executive.get_manager_levels(), [1, 2, 3])

    def test_duplicate_template_relinks_prerequisites(self):
        Template = self.env['hr.appraisal.workflow.template']
        Template.create_default_templates()
        engineer = Template.search([('name', '=', 'Software Engineer Quarterly Appraisal')])

        duplicate = engineer.copy()
        self.assertEqual(duplicate.name, 'Software Engineer Quarterly Appraisal (Copy)')
        stages = duplicate.stage_ids.sorted('sequence')
        self.assertEqual(len(stages), 5)
        self.assertFalse(stages & engineer.stage_ids)
        self.assertEqual(stages[2].required_stage_ids, stages[0] | stages[1])
        self.assertEqual(stages[2].required_stage_ids.template_id, duplicate)
        # the source keeps its own prerequisites
        original_stages = engineer.stage_ids.sorted('sequence')
        self.assertEqual(original_stages[2].required_stage_ids, original_stages[0] | original_stages[1])
