# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import UserError
from dateutil.relativedelta import relativedelta
from datetime import timedelta
import logging

from .hr_appraisal_workflow_stage import parse_manager_level

_logger = logging.getLogger(__name__)

ASSIGNMENT_STATES = [
    ("not_started", "Not Started"),
    ("in_progress", "In Progress"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]

# keys written by the approval screen, not part of an evaluation answer
APPROVAL_KEYS = ("approved", "comment", "approvedAt", "rejectedAt")


def toast_action(message, title="Success", notification_type="success", next_action=None):
    """Client action showing ``message`` as a notification, then ``next_action`` (closes the dialog by default)"""
    return {
        "type": "ir.actions.client",
        "tag": "display_notification",
        "params": {
            "title": title,
            "message": message,
            "sticky": False,
            "type": notification_type,
            "next": next_action or {"type": "ir.actions.act_window_close"},
        },
    }


class HrAppraisalWorkflowAssignment(models.Model):
    _name = "hr.appraisal.workflow.assignment"
    _description = "Appraisal Review Cycle"
    _inherit = ["mail.thread", "mail.activity.mixin"]
    _order = "start_date desc, id desc"

    name = fields.Char(compute="_compute_name", store=True)
    template_id = fields.Many2one(
        "hr.appraisal.workflow.template", string="Procedure", required=True, ondelete="restrict", tracking=True
    )
    employee_id = fields.Many2one(
        "hr.employee", string="Employee", required=True, ondelete="cascade", index=True, tracking=True
    )
    department_id = fields.Many2one(related="employee_id.department_id", store=True)
    state = fields.Selection(
        ASSIGNMENT_STATES, string="Status", default="not_started", required=True, tracking=True
    )
    start_date = fields.Date("Start Date", required=True, default=fields.Date.today)
    end_date = fields.Date("End Date")
    stage_ids = fields.One2many(related="template_id.stage_ids", string="Review Stages")
    current_stage_id = fields.Many2one(
        "hr.appraisal.workflow.stage", string="Current Stage", compute="_compute_current_stage"
    )
    completion_ids = fields.One2many(
        "hr.appraisal.stage.completion", "assignment_id", string="Stage Completions"
    )
    meeting_ids = fields.One2many("hr.appraisal.workflow.meeting", "assignment_id", string="Meetings")
    manager_override_ids = fields.One2many(
        "hr.appraisal.manager.level", "assignment_id", string="Manager Overrides"
    )
    progress_completed = fields.Integer(compute="_compute_progress")
    progress_total = fields.Integer(compute="_compute_progress")
    progress_percent = fields.Float("Progress (%)", compute="_compute_progress")

    @api.depends("template_id.name", "employee_id.name")
    def _compute_name(self):
        for assignment in self:
            assignment.name = f"{assignment.template_id.name or ''} - {assignment.employee_id.name or ''}"

    @api.depends("template_id.stage_ids", "completion_ids.completed")
    def _compute_current_stage(self):
        for assignment in self:
            pending = assignment.template_id.stage_ids.sorted("sequence").filtered(
                lambda s: not assignment.is_stage_completed(s)
            )
            assignment.current_stage_id = pending[:1]

    @api.depends("template_id.stage_ids", "completion_ids.completed")
    def _compute_progress(self):
        for assignment in self:
            total = len(assignment.template_id.stage_ids)
            done = len(assignment.template_id.stage_ids.filtered(lambda s: assignment.is_stage_completed(s)))
            assignment.progress_total = total
            assignment.progress_completed = done
            assignment.progress_percent = (done / total * 100.0) if total else 0.0

    # ------------------------------------------------------------------
    # Managers
    # ------------------------------------------------------------------

    def get_effective_managers(self):
        """Assignment-level overrides when present, otherwise the employee's managers"""
        self.ensure_one()
        return self.manager_override_ids or self.employee_id.appraisal_manager_ids

    def get_manager_for_level(self, level):
        self.ensure_one()
        return self.get_effective_managers().filtered(lambda m: m.level == level and m.is_filled())[:1]

    def get_stage_manager_name(self, stage):
        """Name of the manager taking part in ``stage``; the last resolvable level wins"""
        self.ensure_one()
        name = ""
        for level in stage.get_manager_levels():
            manager = self.get_manager_for_level(level)
            if manager:
                name = manager.get_manager_name()
        return name

    def get_stage_attendee_names(self, stage, with_level=False):
        """Attendee names of ``stage``; ``with_level`` labels managers as ``Manager L<N> (<name>)``"""
        self.ensure_one()
        names = []
        for token in stage.get_attendee_tokens():
            if token == "employee":
                if self.employee_id:
                    names.append(self.employee_id.name)
                continue
            level = parse_manager_level(token)
            manager = self.get_manager_for_level(level)
            if manager:
                name = manager.get_manager_name()
                names.append(f"Manager L{level} ({name})" if with_level else name)
        return names

    def is_stage_participant(self, stage, employee):
        """Whether ``employee`` takes part in ``stage`` of this cycle"""
        self.ensure_one()
        if "employee" in stage.get_attendee_tokens() and self.employee_id == employee:
            return True
        return bool(employee) and any(
            self.get_manager_for_level(level).manager_employee_id == employee
            for level in stage.get_manager_levels()
        )

    def get_stage_participant_users(self, stage):
        """Users of the internal employees taking part in ``stage``"""
        self.ensure_one()
        users = self.env["res.users"]
        if "employee" in stage.get_attendee_tokens():
            users |= self.employee_id.user_id
        for level in stage.get_manager_levels():
            users |= self.get_manager_for_level(level).manager_employee_id.user_id
        return users

    # ------------------------------------------------------------------
    # Stage completion
    # ------------------------------------------------------------------

    @api.model
    def _resolve_stage_context(self, assignment_id, stage_id):
        """Assignment and stage for a stage screen, or a user-facing error"""
        assignment = self.browse(assignment_id).exists() if assignment_id else self.browse()
        if not assignment:
            raise UserError("Assignment not found")
        if not assignment.template_id:
            raise UserError("Workflow template not found")
        stage = self.env["hr.appraisal.workflow.stage"].browse(stage_id).exists() if stage_id else False
        if not stage or stage.template_id != assignment.template_id:
            raise UserError("Review stage not found")
        if not assignment.employee_id:
            raise UserError("Employee not found")
        return assignment, stage

    def get_completion(self, stage):
        self.ensure_one()
        return self.completion_ids.filtered(lambda c: c.stage_id == stage)[:1]

    def is_stage_completed(self, stage):
        self.ensure_one()
        return bool(self.get_completion(stage).completed)

    def get_stage_due_date(self, stage):
        self.ensure_one()
        return stage.compute_due_date(self.start_date, self.end_date)

    def check_stage_prerequisites(self, stage):
        self.ensure_one()
        missing = stage.required_stage_ids.sorted("sequence").filtered(lambda s: not self.is_stage_completed(s))
        if missing:
            raise UserError(
                f"Please complete the following stages first: {', '.join(missing.mapped('name'))}"
            )

    def _check_open(self):
        self.ensure_one()
        if self.state == "cancelled":
            raise UserError("This review cycle has been cancelled.")

    def _complete_stage(self, stage, form_data, approved=None, comment=None, notify=True):
        """Record ``stage`` as completed by the current user and refresh the cycle status"""
        self.ensure_one()
        vals = {
            "completed": True,
            "completed_date": fields.Datetime.now(),
            "completed_by_id": self.env.user.id,
            "form_data": form_data or {},
        }
        if approved is not None:
            vals["approved"] = approved
        if comment is not None:
            vals["comment"] = comment
        completion = self.get_completion(stage)
        if completion:
            completion.write(vals)
        else:
            completion = self.env["hr.appraisal.stage.completion"].create(
                dict(vals, assignment_id=self.id, stage_id=stage.id)
            )
        self._close_stage_activities(f"{stage.name} completed by {self.env.user.name}", stage)
        self._update_state_from_completions()
        if notify:
            self.env["hr.appraisal.notification"].notify_stage_completed(self, stage)
        return completion

    def _update_state_from_completions(self):
        for assignment in self:
            stages = assignment.template_id.stage_ids
            if stages and all(assignment.is_stage_completed(s) for s in stages):
                assignment.state = "completed"
            else:
                assignment.state = "in_progress"

    def submit_stage_form(self, stage, form_data):
        """Validate and store the evaluation answers of ``stage``"""
        self.ensure_one()
        self._check_open()
        form = stage.evaluation_form_id
        if not form:
            raise UserError("Form not found")
        self.check_stage_prerequisites(stage)
        form.validate_form_data(form_data)
        completion = self._complete_stage(stage, form_data)
        self.meeting_ids.filtered(
            lambda m: m.evaluation_form_id == form and m.state == "completed" and not m.form_completed
        ).mark_form_completed()
        self.message_post(body=f"{stage.name} submitted by {self.env.user.name}.")
        return completion

    def approve_stage(self, stage, comment=""):
        self.ensure_one()
        self._check_open()
        self.check_stage_prerequisites(stage)
        form_data = {
            "approved": True,
            "comment": comment or "",
            "approvedAt": fields.Datetime.to_string(fields.Datetime.now()),
        }
        completion = self._complete_stage(stage, form_data, approved=True, comment=comment or "")
        self.message_post(body=f"{stage.name} approved by {self.env.user.name}.")
        return completion

    def reject_stage(self, stage, comment):
        """Reject the appraisal at ``stage``; a reason is mandatory and the cycle is cancelled"""
        self.ensure_one()
        if not (comment or "").strip():
            raise UserError("Please provide a reason for rejection")
        self._check_open()
        form_data = {
            "approved": False,
            "comment": comment,
            "rejectedAt": fields.Datetime.to_string(fields.Datetime.now()),
        }
        self._close_stage_activities(f"Rejected: {comment}")
        completion = self._complete_stage(stage, form_data, approved=False, comment=comment, notify=False)
        self.state = "cancelled"
        self.env["hr.appraisal.notification"].notify_stage_rejected(self, stage, comment)
        self.message_post(body=f"{stage.name} rejected by {self.env.user.name}: {comment}")
        return completion

    def complete_meeting_stage(self, stage, notes):
        """Store the notes of a held meeting and close the matching scheduled meeting"""
        self.ensure_one()
        if not (notes or "").strip():
            raise UserError("Please add meeting notes before ending the meeting")
        self._check_open()
        self.check_stage_prerequisites(stage)
        ended_at = fields.Datetime.now()
        form_data = {
            "meetingNotes": notes,
            "meetingEndedAt": fields.Datetime.to_string(ended_at),
        }
        completion = self._complete_stage(stage, form_data)
        level = stage.manager_level or (stage.get_manager_levels() or [0])[0]
        meeting = self.meeting_ids.filtered(
            lambda m: m.manager_level == level and m.state in ("scheduled", "rescheduled")
        ).sorted("scheduled_date")[:1]
        if meeting:
            meeting.action_complete(notes, actual_date=ended_at.date())
        return completion

    def get_completed_stages(self):
        """Completed stages in order with their evaluation answers (approval keys removed)"""
        self.ensure_one()
        result = []
        for stage in self.template_id.stage_ids.sorted("sequence"):
            completion = self.get_completion(stage)
            if not completion.completed:
                continue
            form_data = {
                key: value
                for key, value in (completion.form_data or {}).items()
                if key not in APPROVAL_KEYS
            }
            result.append({"stage": stage, "completion": completion, "form_data": form_data})
        return result

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def get_task_context(self, stage, user_employee):
        """What ``user_employee`` is doing in ``stage`` of this cycle"""
        self.ensure_one()
        is_own_task = user_employee == self.employee_id
        role = "employee"
        tokens = stage.get_attendee_tokens()
        if not ("employee" in tokens and is_own_task):
            levels = stage.get_manager_levels()
            manager = self.get_manager_for_level(levels[0]) if levels else False
            if manager and manager.manager_employee_id and manager.manager_employee_id == user_employee:
                if stage.stage_type == "review":
                    role = "reviewer"
                elif stage.stage_type == "approval":
                    role = "approver"
                else:
                    role = "manager"
        return {
            "employee_name": self.employee_id.name,
            "employee_id": self.employee_id.id,
            "user_name": user_employee.name if user_employee else "",
            "stage_name": stage.name,
            "stage_type": stage.stage_type,
            "procedure_name": self.template_id.name,
            "is_own_task": is_own_task,
            "role": role,
        }

    @api.model
    def format_task_context_display(self, context):
        title = f"{context['stage_name']} - {context['procedure_name']}"
        if context["is_own_task"]:
            subtitle = f"For: {context['employee_name']} (You)"
            badge = f"Your {context['stage_type']}"
        else:
            role = context["role"].capitalize()
            subtitle = f"For: {context['employee_name']} | Your Role: {role}"
            badge = f"{role} {context['stage_type']}"
        return {"title": title, "subtitle": subtitle, "badge": badge}

    def get_stage_task_status(self, stage):
        self.ensure_one()
        if self.state == "cancelled":
            return "cancelled"
        if self.is_stage_completed(stage):
            return "completed"
        due_date = self.get_stage_due_date(stage)
        if due_date and due_date < fields.Date.today():
            return "overdue"
        if stage == self.current_stage_id:
            return "in_progress"
        return "pending"

    @api.model
    def get_tasks_for_employee(self, employee):
        """Every stage ``employee`` takes part in, as the appraised employee or as a manager"""
        tasks = []
        if not employee:
            return tasks
        for assignment in self.search([]):
            for stage in assignment.template_id.stage_ids.sorted("sequence"):
                if not assignment.is_stage_participant(stage, employee):
                    continue
                context = assignment.get_task_context(stage, employee)
                display = self.format_task_context_display(context)
                tasks.append({
                    "assignment_id": assignment.id,
                    "stage_id": stage.id,
                    "employee_id": assignment.employee_id.id,
                    "stage_name": stage.name,
                    "stage_type": stage.stage_type,
                    "procedure_name": assignment.template_id.name,
                    "status": assignment.get_stage_task_status(stage),
                    "due_date": assignment.get_stage_due_date(stage),
                    "attendees": assignment.get_stage_attendee_names(stage, with_level=True),
                    "form_id": stage.evaluation_form_id.id,
                    "role": context["role"],
                    "title": display["title"],
                    "subtitle": display["subtitle"],
                    "badge": display["badge"],
                })
        return tasks

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_open_stage(self, stage=None):
        """Open the screen that handles ``stage`` (defaults to the current stage)"""
        self.ensure_one()
        if stage is None:
            stage_id = self.env.context.get("stage_id")
            stage = self.env["hr.appraisal.workflow.stage"].browse(stage_id) if stage_id else self.current_stage_id
        if not stage:
            raise UserError("All stages of this review cycle are completed.")
        assignment, stage = self._resolve_stage_context(self.id, stage.id)
        context = {"default_assignment_id": assignment.id, "default_stage_id": stage.id}
        if stage.stage_type == "meeting":
            res_model, name = "hr.appraisal.meeting.join.wizard", "Join Meeting"
        elif stage.stage_type == "approval":
            res_model, name = "hr.appraisal.approval.review.wizard", "Review & Approve"
        else:
            if not stage.evaluation_form_id:
                raise UserError("Form not found")
            res_model, name = "hr.appraisal.form.fill.wizard", stage.evaluation_form_id.name
        return {
            "type": "ir.actions.act_window",
            "name": name,
            "res_model": res_model,
            "view_mode": "form",
            "target": "new",
            "context": context,
        }

    def action_open_current_stage(self):
        self.ensure_one()
        return self.action_open_stage(self.current_stage_id)

    def action_edit_managers(self):
        self.ensure_one()
        return {
            "type": "ir.actions.act_window",
            "name": "Edit Managers",
            "res_model": "hr.appraisal.manager.override.wizard",
            "view_mode": "form",
            "target": "new",
            "context": {"default_assignment_id": self.id},
        }

    def action_cancel(self):
        for assignment in self:
            assignment._close_stage_activities("Review cycle cancelled")
        self.write({"state": "cancelled"})

    def _stage_activity_summary(self, stage):
        return f"{stage.name}: {self.employee_id.name}"

    def schedule_stage_activities(self, stage):
        """To Do activity on the cycle for every internal participant of ``stage``"""
        self.ensure_one()
        deadline = self.get_stage_due_date(stage) or fields.Date.today()
        for user in self.get_stage_participant_users(stage):
            try:
                self.activity_schedule(
                    "mail.mail_activity_data_todo",
                    date_deadline=deadline,
                    user_id=user.id,
                    summary=self._stage_activity_summary(stage),
                    note=f"{stage.name} of {self.template_id.name} is waiting for you.",
                )
            except Exception as e:
                _logger.warning(f"Failed to schedule activity for {stage.name} on {self.name}: {e}")

    def _close_stage_activities(self, feedback, stage=None):
        """Mark the open activities of ``stage`` as done, or all of them when no stage is given"""
        self.ensure_one()
        # participants close the activities of the others taking part in the stage
        activities = self.sudo().activity_ids
        if stage:
            summary = self._stage_activity_summary(stage)
            activities = activities.filtered(lambda a: a.summary == summary)
        activities.action_feedback(feedback=feedback)

    def action_schedule_meetings(self):
        """One scheduled meeting per meeting frequency of the procedure"""
        Meeting = self.env["hr.appraisal.workflow.meeting"]
        meetings = Meeting
        for assignment in self:
            for frequency in assignment.template_id.meeting_frequency_ids:
                attendees = assignment.employee_id
                attendees |= assignment.get_manager_for_level(frequency.manager_level).manager_employee_id
                meetings |= Meeting.create({
                    "assignment_id": assignment.id,
                    "manager_level": frequency.manager_level,
                    "scheduled_date": frequency.compute_next_meeting_date(assignment.start_date),
                    "attendee_ids": [(6, 0, attendees.ids)],
                    "evaluation_form_id": frequency.evaluation_form_id.id,
                })
        return meetings

    # ------------------------------------------------------------------
    # Search and demo data
    # ------------------------------------------------------------------

    @api.model
    def search_assignments(self, search="", state="all"):
        """Cycles whose employee or procedure name contains ``search``, optionally of one status"""
        domain = []
        if state and state != "all":
            domain.append(("state", "=", state))
        assignments = self.search(domain)
        term = (search or "").strip().lower()
        if not term:
            return assignments
        return assignments.filtered(
            lambda a: term in (a.employee_id.name or "").lower()
            or term in (a.template_id.name or "").lower()
        )

    @api.model
    def _demo_end_date(self, template, start_date):
        months = {"monthly": 1, "quarterly": 3, "biannually": 6}
        if template.interval_type in months:
            return start_date + relativedelta(months=months[template.interval_type])
        if template.interval_type == "annually":
            return start_date + relativedelta(years=1)
        if template.interval_type == "custom" and template.interval_unit == "months":
            return start_date + relativedelta(months=template.interval_value)
        return start_date + timedelta(days=template.get_interval_days())

    @api.model
    def initialize_demo_assignments(self):
        """Create one review cycle per procedure assigned to each employee"""
        config = self.env["hr.appraisal.workflow.config"].get_config()
        today = fields.Date.today()
        employees = self.env["hr.employee"].with_context(active_test=False).search(
            [("workflow_template_ids", "!=", False)]
        )
        created = self.browse()
        for employee in employees:
            for index, template in enumerate(employee.workflow_template_ids):
                if self.search_count([("employee_id", "=", employee.id), ("template_id", "=", template.id)]):
                    continue
                start_date = today - relativedelta(months=index * config.demo_stagger_months)
                end_date = self._demo_end_date(template, start_date)
                if end_date < today:
                    state = "completed"
                elif start_date <= today:
                    state = "in_progress"
                else:
                    state = "not_started"
                if not employee.active and state != "completed":
                    state = "cancelled"
                assignment = self.create({
                    "template_id": template.id,
                    "employee_id": employee.id,
                    "start_date": start_date,
                    "end_date": end_date,
                    "state": state,
                })
                assignment._create_demo_completions()
                created |= assignment
        if created:
            _logger.info(f"Initialized {len(created)} demo appraisal review cycles")
        return created

    def _create_demo_completions(self):
        Completion = self.env["hr.appraisal.stage.completion"]
        today = fields.Date.today()
        for assignment in self:
            for stage in assignment.template_id.stage_ids:
                due_date = assignment.get_stage_due_date(stage)
                if assignment.state == "completed":
                    completed_on = assignment.end_date
                elif assignment.state == "in_progress" and due_date and due_date < today:
                    completed_on = due_date
                else:
                    continue
                completed_by = (
                    assignment.employee_id.user_id if "employee" in stage.get_attendee_tokens() else False
                )
                Completion.create({
                    "assignment_id": assignment.id,
                    "stage_id": stage.id,
                    "completed": True,
                    "completed_date": fields.Datetime.to_datetime(completed_on),
                    "completed_by_id": completed_by.id if completed_by else False,
                    "form_data": {"field-1": 4} if stage.evaluation_form_id else {},
                })
