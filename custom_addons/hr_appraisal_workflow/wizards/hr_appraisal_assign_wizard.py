# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import UserError
import logging

from ..models.hr_appraisal_workflow_assignment import toast_action

_logger = logging.getLogger(__name__)


class HrAppraisalAssignWizard(models.TransientModel):
    _name = "hr.appraisal.assign.wizard"
    _description = "Assign Review Cycle"

    template_id = fields.Many2one("hr.appraisal.workflow.template", string="Review Cycle")
    employee_ids = fields.Many2many(
        "hr.employee",
        "hr_appraisal_assign_wizard_employee_rel",
        "wizard_id",
        "employee_id",
        string="Employees",
    )
    start_date = fields.Date("Start Date", required=True, default=fields.Date.today)
    end_date = fields.Date("End Date", compute="_compute_end_date")
    stage_count = fields.Integer(related="template_id.stage_count")

    @api.depends("template_id", "start_date")
    def _compute_end_date(self):
        for wizard in self:
            if wizard.template_id and wizard.start_date:
                wizard.end_date = wizard.template_id.compute_end_date(wizard.start_date)
            else:
                wizard.end_date = False

    def action_assign(self):
        self.ensure_one()
        if not self.template_id:
            raise UserError("Please select a review cycle")
        if not self.employee_ids:
            raise UserError("Please select at least one employee")
        template = self.template_id.exists()
        if not template or not template.active:
            raise UserError("Review cycle template not found")
        for employee in self.employee_ids:
            if not template.is_applicable_to(employee):
                raise UserError(f"Procedure not applicable for {employee.name}")

        Assignment = self.env["hr.appraisal.workflow.assignment"]
        Notification = self.env["hr.appraisal.notification"]
        end_date = template.compute_end_date(self.start_date)
        assignments = Assignment
        for employee in self.employee_ids:
            assignment = Assignment.create({
                "template_id": template.id,
                "employee_id": employee.id,
                "start_date": self.start_date,
                "end_date": end_date,
                "state": "not_started",
            })
            if template not in employee.workflow_template_ids:
                employee.write({"workflow_template_ids": [(4, template.id)]})
            assignment.action_schedule_meetings()
            if assignment.current_stage_id:
                assignment.schedule_stage_activities(assignment.current_stage_id)
            Notification.notify_assignment_created(assignment)
            Notification.generate_reminders_for_assignment(assignment)
            assignments |= assignment

        _logger.info(f"Assigned {template.name} to {len(assignments)} employee(s)")
        return toast_action(f"Review cycle assigned to {len(assignments)} employee(s)!")
