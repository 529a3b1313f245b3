# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import ValidationError
from datetime import timedelta

from .hr_appraisal_workflow_template import INTERVAL_TYPES, INTERVAL_UNITS, interval_to_days


class HrAppraisalMeetingFrequency(models.Model):
    _name = "hr.appraisal.meeting.frequency"
    _description = "Manager Level Meeting Frequency"
    _order = "template_id, manager_level"

    template_id = fields.Many2one(
        "hr.appraisal.workflow.template", string="Procedure", required=True, ondelete="cascade"
    )
    manager_level = fields.Integer("Manager Level", required=True, default=1)
    frequency_type = fields.Selection(INTERVAL_TYPES, string="Frequency", required=True, default="monthly")
    frequency_value = fields.Integer("Every")
    frequency_unit = fields.Selection(INTERVAL_UNITS, string="Unit")
    evaluation_form_id = fields.Many2one(
        "hr.appraisal.evaluation.form",
        string="Evaluation Form",
        help="Form to be filled before or after the meeting",
    )

    @api.constrains("manager_level")
    def _check_manager_level(self):
        for record in self:
            if record.manager_level < 1:
                raise ValidationError("Meeting manager level must be at least 1.")

    def get_frequency_days(self):
        self.ensure_one()
        return interval_to_days(
            self.frequency_type, self.frequency_value, self.frequency_unit, month_days=30, default=30
        )

    def compute_next_meeting_date(self, last_date=None):
        """Next meeting after ``last_date`` (or today when no meeting took place yet)"""
        self.ensure_one()
        base_date = last_date or fields.Date.today()
        return base_date + timedelta(days=self.get_frequency_days())
