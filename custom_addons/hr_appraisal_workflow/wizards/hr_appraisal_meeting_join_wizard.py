# -*- coding: utf-8 -*-
from odoo import models, fields, api

from ..models.hr_appraisal_workflow_assignment import toast_action


class HrAppraisalMeetingJoinWizard(models.TransientModel):
    _name = "hr.appraisal.meeting.join.wizard"
    _description = "Join Appraisal Meeting"

    assignment_id = fields.Many2one("hr.appraisal.workflow.assignment", string="Review Cycle", required=True)
    stage_id = fields.Many2one("hr.appraisal.workflow.stage", string="Stage", required=True)
    employee_id = fields.Many2one(related="assignment_id.employee_id")
    template_id = fields.Many2one(related="assignment_id.template_id", string="Procedure")
    stage_description = fields.Text(related="stage_id.description")
    manager_name = fields.Char("Manager", compute="_compute_participants")
    attendee_names = fields.Char("Attendees", compute="_compute_participants")
    meeting_id = fields.Many2one("hr.appraisal.workflow.meeting", compute="_compute_participants")
    notes = fields.Text("Meeting Notes")
    in_meeting = fields.Boolean("In Meeting", default=False)
    is_muted = fields.Boolean("Muted", default=False)
    is_video_off = fields.Boolean("Video Off", default=False)

    @api.depends("assignment_id", "stage_id")
    def _compute_participants(self):
        for wizard in self:
            assignment, stage = wizard.assignment_id, wizard.stage_id
            if not assignment or not stage:
                wizard.manager_name = ""
                wizard.attendee_names = ""
                wizard.meeting_id = False
                continue
            wizard.manager_name = assignment.get_stage_manager_name(stage)
            wizard.attendee_names = ", ".join(assignment.get_stage_attendee_names(stage))
            level = stage.manager_level or (stage.get_manager_levels() or [0])[0]
            wizard.meeting_id = assignment.meeting_ids.filtered(
                lambda m: m.manager_level == level and m.state in ("scheduled", "rescheduled")
            ).sorted("scheduled_date")[:1]

    @api.model
    def default_get(self, fields_list):
        res = super().default_get(fields_list)
        if res.get("assignment_id") and res.get("stage_id"):
            assignment, stage = self.env["hr.appraisal.workflow.assignment"]._resolve_stage_context(
                res["assignment_id"], res["stage_id"]
            )
            form_data = assignment.get_completion(stage).form_data or {}
            if form_data.get("meetingNotes") and "notes" in fields_list:
                res["notes"] = form_data["meetingNotes"]
        return res

    def _reopen(self):
        self.ensure_one()
        return {
            "type": "ir.actions.act_window",
            "name": "Join Meeting",
            "res_model": self._name,
            "res_id": self.id,
            "view_mode": "form",
            "target": "new",
        }

    def action_join(self):
        self.ensure_one()
        assignment, _stage = self.env["hr.appraisal.workflow.assignment"]._resolve_stage_context(
            self.assignment_id.id, self.stage_id.id
        )
        assignment._check_open()
        self.in_meeting = True
        return toast_action("Meeting started", next_action=self._reopen())

    def action_end(self):
        self.ensure_one()
        assignment, stage = self.env["hr.appraisal.workflow.assignment"]._resolve_stage_context(
            self.assignment_id.id, self.stage_id.id
        )
        assignment.complete_meeting_stage(stage, self.notes)
        self.in_meeting = False
        return toast_action("Meeting completed successfully!")

    def action_cancel(self):
        self.ensure_one()
        self.in_meeting = False
        return toast_action("Meeting cancelled", title="Cancelled", notification_type="info")

    def action_toggle_mute(self):
        self.ensure_one()
        self.is_muted = not self.is_muted
        return self._reopen()

    def action_toggle_video(self):
        self.ensure_one()
        self.is_video_off = not self.is_video_off
        return self._reopen()
