# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import UserError

MEETING_STATES = [
    ("scheduled", "Scheduled"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
    ("rescheduled", "Rescheduled"),
]


class HrAppraisalWorkflowMeeting(models.Model):
    _name = "hr.appraisal.workflow.meeting"
    _description = "Appraisal Meeting"
    _order = "scheduled_date, id"

    assignment_id = fields.Many2one(
        "hr.appraisal.workflow.assignment", string="Review Cycle", required=True, ondelete="cascade", index=True
    )
    employee_id = fields.Many2one(related="assignment_id.employee_id", store=True)
    manager_level = fields.Integer("Manager Level", default=1)
    manager_name = fields.Char(compute="_compute_manager_name")
    scheduled_date = fields.Date("Scheduled Date", required=True)
    actual_date = fields.Date("Held On")
    state = fields.Selection(MEETING_STATES, string="Status", default="scheduled", required=True)
    attendee_ids = fields.Many2many(
        "hr.employee",
        "hr_appraisal_workflow_meeting_attendee_rel",
        "meeting_id",
        "employee_id",
        string="Attendees",
    )
    notes = fields.Text("Notes")
    evaluation_form_id = fields.Many2one("hr.appraisal.evaluation.form", string="Evaluation Form")
    form_completed = fields.Boolean("Form Completed")
    form_completed_date = fields.Datetime("Form Completed On")
    meeting_reminder_sent = fields.Boolean("Meeting Reminder Sent")

    @api.depends("assignment_id", "manager_level")
    def _compute_manager_name(self):
        for meeting in self:
            manager = meeting.assignment_id.get_manager_for_level(meeting.manager_level) if meeting.assignment_id else False
            meeting.manager_name = manager.get_manager_name() if manager else ""

    def action_complete(self, notes=None, actual_date=None):
        for meeting in self:
            if meeting.state == "cancelled":
                raise UserError("A cancelled meeting cannot be completed.")
            vals = {"state": "completed", "actual_date": actual_date or fields.Date.today()}
            if notes is not None:
                vals["notes"] = notes
            meeting.write(vals)
        return True

    def action_reschedule(self, new_date):
        for meeting in self:
            if meeting.state in ("completed", "cancelled"):
                raise UserError("Only upcoming meetings can be rescheduled.")
            meeting.write({"state": "rescheduled", "scheduled_date": new_date})
        return True

    def action_cancel(self):
        if self.filtered(lambda m: m.state == "completed"):
            raise UserError("A completed meeting cannot be cancelled.")
        self.write({"state": "cancelled"})
        return True

    def mark_form_completed(self):
        self.write({"form_completed": True, "form_completed_date": fields.Datetime.now()})
