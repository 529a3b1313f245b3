# -*- coding: utf-8 -*-
from odoo import models, fields, api
from datetime import timedelta
import logging

_logger = logging.getLogger(__name__)

NOTIFICATION_CATEGORIES = [
    ("evaluation_pending", "Evaluation Pending"),
    ("evaluation_completed", "Evaluation Completed"),
    ("action_required", "Action Required"),
    ("meeting_scheduled", "Meeting Scheduled"),
    ("meeting_reminder", "Meeting Reminder"),
    ("form_due", "Form Due"),
    ("form_overdue", "Form Overdue"),
    ("stage_completed", "Stage Completed"),
    ("assignment_created", "Assignment Created"),
    ("system", "System"),
]


def _format_date(value):
    return value.strftime("%b %d, %Y")


class HrAppraisalNotification(models.Model):
    _name = "hr.appraisal.notification"
    _description = "Appraisal Notification"
    _order = "create_date desc, id desc"

    user_id = fields.Many2one("res.users", string="Recipient", required=True, ondelete="cascade", index=True)
    category = fields.Selection(NOTIFICATION_CATEGORIES, string="Category", required=True, default="system")
    title = fields.Char("Title", required=True)
    message = fields.Text("Message")
    is_read = fields.Boolean("Read", default=False, index=True)
    assignment_id = fields.Many2one("hr.appraisal.workflow.assignment", string="Review Cycle", ondelete="cascade")
    stage_id = fields.Many2one("hr.appraisal.workflow.stage", string="Stage", ondelete="cascade")
    employee_id = fields.Many2one("hr.employee", string="Employee", ondelete="cascade")
    meeting_id = fields.Many2one("hr.appraisal.workflow.meeting", string="Meeting", ondelete="cascade")
    form_id = fields.Many2one("hr.appraisal.evaluation.form", string="Form", ondelete="set null")
    scheduled_date = fields.Date("Scheduled For", help="Hidden from the recipient until this date")
    sent = fields.Boolean("Sent", default=False)
    sent_date = fields.Datetime("Sent On")
    channel_email = fields.Boolean("Email", default=True)
    channel_inapp = fields.Boolean("In-App", default=True)
    channel_sms = fields.Boolean("SMS", default=False)
    dedup_key = fields.Char("Deduplication Key", copy=False, index=True)

    _sql_constraints = [
        ("unique_dedup_key", "UNIQUE(dedup_key)", "This notification already exists."),
    ]

    # ------------------------------------------------------------------
    # Feed
    # ------------------------------------------------------------------

    @api.model
    def generate_for_user(self, user=None):
        """Notifications visible to ``user`` today, newest first"""
        user = user or self.env.user
        return self.search([
            ("user_id", "=", user.id),
            "|", ("scheduled_date", "=", False), ("scheduled_date", "<=", fields.Date.today()),
        ])

    @api.model
    def filter_notifications(self, notifications, category="all", read_filter="all"):
        result = notifications
        if read_filter == "unread":
            result = result.filtered(lambda n: not n.is_read)
        if category and category != "all":
            result = result.filtered(lambda n: n.category == category)
        return result

    def mark_as_read(self):
        self.write({"is_read": True})
        return True

    @api.model
    def mark_all_as_read(self, user=None):
        user = user or self.env.user
        self.search([("user_id", "=", user.id), ("is_read", "=", False)]).write({"is_read": True})
        return True

    @api.model
    def get_unread_count(self, user=None):
        return len(self.generate_for_user(user).filtered(lambda n: not n.is_read))

    @api.model
    def get_category_counts(self, user=None):
        """Unread notifications per category; every category is present"""
        counts = {category: 0 for category, _label in NOTIFICATION_CATEGORIES}
        for notification in self.generate_for_user(user).filtered(lambda n: not n.is_read):
            counts[notification.category] += 1
        return counts

    def action_open(self):
        self.ensure_one()
        self.mark_as_read()
        if self.assignment_id and self.stage_id:
            return self.assignment_id.action_open_stage(self.stage_id)
        if self.assignment_id:
            return {
                "type": "ir.actions.act_window",
                "res_model": "hr.appraisal.workflow.assignment",
                "res_id": self.assignment_id.id,
                "view_mode": "form",
                "target": "current",
            }
        return {"type": "ir.actions.act_window_close"}

    def action_mark_read(self):
        self.mark_as_read()

    @api.model
    def action_mark_all_read(self):
        self.mark_all_as_read()
        return {"type": "ir.actions.client", "tag": "reload"}

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @api.model
    def _create_unique(self, vals):
        """Create a notification unless one with the same ``dedup_key`` exists"""
        Notification = self.sudo()
        if vals.get("dedup_key"):
            existing = Notification.search([("dedup_key", "=", vals["dedup_key"])], limit=1)
            if existing:
                return existing
        return Notification.create(vals)

    @api.model
    def _channel_vals(self, template):
        return {
            "channel_email": template.channel_email,
            "channel_inapp": template.channel_inapp,
            "channel_sms": template.channel_sms,
        }

    @api.model
    def generate_reminders_for_assignment(self, assignment):
        """Scheduled form and meeting reminders for the employee of ``assignment``"""
        template = assignment.template_id
        employee = assignment.employee_id
        notifications = self.browse()
        if not template.notification_enabled or not employee:
            return notifications
        user = employee.user_id
        if not user:
            _logger.info(f"Employee {employee.name} has no user, skipping reminders for {assignment.name}")
            return notifications
        today = fields.Date.today()
        base = dict(
            self._channel_vals(template),
            user_id=user.id,
            assignment_id=assignment.id,
            employee_id=employee.id,
        )

        for stage in template.stage_ids.sorted("sequence"):
            due_date = assignment.get_stage_due_date(stage)
            if not due_date:
                continue
            reminder_date = due_date - timedelta(days=stage.reminder_days or template.form_reminder_days)
            if stage.reminder_enabled and reminder_date >= today:
                notifications |= self._create_unique(dict(
                    base,
                    category="evaluation_pending",
                    stage_id=stage.id,
                    form_id=stage.evaluation_form_id.id,
                    title=f"Evaluation Form Due Soon: {stage.name}",
                    message=f'Your evaluation form "{stage.name}" is due on {_format_date(due_date)}. '
                            f"Please complete it before the due date.",
                    scheduled_date=reminder_date,
                    dedup_key=f"assignment-{assignment.id}-stage-{stage.id}-form-reminder",
                ))
            notifications |= self._create_unique(dict(
                base,
                category="form_due",
                stage_id=stage.id,
                form_id=stage.evaluation_form_id.id,
                title=f"Evaluation Form Due: {stage.name}",
                message=f'Your evaluation form "{stage.name}" is due today. Please complete it as soon as possible.',
                scheduled_date=due_date,
                dedup_key=f"assignment-{assignment.id}-stage-{stage.id}-form-due",
            ))

        for frequency in template.meeting_frequency_ids:
            level = frequency.manager_level
            meeting_date = frequency.compute_next_meeting_date()
            meeting = assignment.meeting_ids.filtered(
                lambda m: m.manager_level == level and m.state in ("scheduled", "rescheduled")
            ).sorted("scheduled_date")[:1]
            reminder_date = meeting_date - timedelta(days=template.meeting_reminder_days)
            if reminder_date >= today:
                notifications |= self._create_unique(dict(
                    base,
                    category="meeting_reminder",
                    meeting_id=meeting.id,
                    title=f"Evaluation Meeting Scheduled: Level {level} Manager",
                    message=f"You have an evaluation meeting scheduled with your Level {level} manager on "
                            f"{_format_date(meeting_date)}. Please prepare accordingly.",
                    scheduled_date=reminder_date,
                    dedup_key=f"assignment-{assignment.id}-meeting-reminder-level-{level}",
                ))
            notifications |= self._create_unique(dict(
                base,
                category="meeting_scheduled",
                meeting_id=meeting.id,
                title="Evaluation Meeting Scheduled",
                message=f"An evaluation meeting has been scheduled for {_format_date(meeting_date)} "
                        f"with your Level {level} manager.",
                scheduled_date=meeting_date,
                dedup_key=f"assignment-{assignment.id}-meeting-scheduled-level-{level}",
            ))
        return notifications

    @api.model
    def _notify_users(self, users, category, title, message, assignment, stage=None):
        """Immediate notification of ``users`` about an event of ``assignment``"""
        notifications = self.browse()
        template = assignment.template_id
        for user in users:
            notifications |= self.sudo().create(dict(
                self._channel_vals(template),
                user_id=user.id,
                category=category,
                title=title,
                message=message,
                assignment_id=assignment.id,
                employee_id=assignment.employee_id.id,
                stage_id=stage.id if stage else False,
                form_id=stage.evaluation_form_id.id if stage else False,
            ))
        if template.notification_enabled:
            notifications.send()
        return notifications

    @api.model
    def notify_assignment_created(self, assignment):
        employee = assignment.employee_id
        start = _format_date(assignment.start_date)
        return self._notify_users(
            employee.user_id,
            "assignment_created",
            f"New Review Cycle: {assignment.template_id.name}",
            f'The review cycle "{assignment.template_id.name}" has been assigned to you, starting {start}.',
            assignment,
        )

    @api.model
    def notify_stage_completed(self, assignment, stage):
        """Tell the employee a stage is done and the participants of the next stage it is their turn"""
        employee = assignment.employee_id
        procedure = assignment.template_id.name
        if stage.stage_type == "evaluation":
            category, title = "evaluation_completed", f"Evaluation Completed: {stage.name}"
        else:
            category, title = "stage_completed", f"Stage Completed: {stage.name}"
        notifications = self._notify_users(
            employee.user_id,
            category,
            title,
            f'"{stage.name}" of {procedure} for {employee.name} has been completed.',
            assignment,
            stage,
        )

        next_stage = assignment.current_stage_id
        if not next_stage or assignment.state != "in_progress":
            return notifications
        if next_stage.stage_type == "meeting":
            category, title = "meeting_scheduled", f"Meeting Ready: {next_stage.name}"
        elif next_stage.stage_type == "approval":
            category, title = "action_required", f"Approval Required: {next_stage.name}"
        else:
            category, title = "evaluation_pending", f"Evaluation Pending: {next_stage.name}"
        due_date = assignment.get_stage_due_date(next_stage)
        message = f'"{next_stage.name}" of {procedure} for {employee.name} is ready for you.'
        if due_date:
            message += f" It is due on {_format_date(due_date)}."
        notifications |= self._notify_users(
            assignment.get_stage_participant_users(next_stage),
            category,
            title,
            message,
            assignment,
            next_stage,
        )
        assignment.schedule_stage_activities(next_stage)
        return notifications

    @api.model
    def notify_stage_rejected(self, assignment, stage, reason):
        return self._notify_users(
            assignment.employee_id.user_id,
            "action_required",
            f"Appraisal Rejected: {stage.name}",
            f'"{stage.name}" of {assignment.template_id.name} was rejected: {reason}',
            assignment,
            stage,
        )

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def should_send(self):
        """Unsent, due, and not older than the grace period"""
        self.ensure_one()
        if self.sent:
            return False
        today = fields.Date.today()
        scheduled = self.scheduled_date or today
        if scheduled > today:
            return False
        grace_days = self.env["hr.appraisal.workflow.config"].get_config().notification_grace_days
        return (today - scheduled).days <= grace_days

    def send(self):
        config = self.env["hr.appraisal.workflow.config"].get_config()
        for notification in self:
            partner = notification.user_id.partner_id
            if notification.channel_inapp and config.send_inapp_notifications:
                try:
                    self.env["bus.bus"]._sendone(
                        partner,
                        "appraisal_notification",
                        {
                            "id": notification.id,
                            "title": notification.title,
                            "message": notification.message,
                            "category": notification.category,
                            "type": "info",
                        },
                    )
                except Exception as e:
                    _logger.warning(f"In-app delivery failed for notification {notification.id}: {e}")
            if notification.channel_email and config.send_email_notifications and partner:
                record = notification.assignment_id or partner
                record.sudo().message_post(
                    body=notification.message or notification.title,
                    subject=notification.title,
                    partner_ids=[partner.id],
                    message_type="notification",
                    subtype_xmlid="mail.mt_note",
                )
            if notification.channel_sms:
                _logger.info(
                    f"SMS notification '{notification.title}' for {notification.user_id.name} "
                    f"({notification.employee_id.mobile_phone or 'no mobile number'})"
                )
        self.write({"sent": True, "sent_date": fields.Datetime.now()})
        self.filtered(lambda n: n.category == "meeting_reminder").meeting_id.sudo().write(
            {"meeting_reminder_sent": True}
        )
        return True

    # ------------------------------------------------------------------
    # Crons
    # ------------------------------------------------------------------

    @api.model
    def cron_send_scheduled_notifications(self):
        pending = self.search([
            ("sent", "=", False),
            ("scheduled_date", "!=", False),
            ("scheduled_date", "<=", fields.Date.today()),
        ])
        sent = 0
        for notification in pending:
            try:
                if notification.should_send():
                    notification.send()
                    sent += 1
            except Exception as e:
                _logger.error(f"Failed to send appraisal notification {notification.id}: {e}")
        _logger.info(f"Sent {sent} scheduled appraisal notifications")
        return sent

    @api.model
    def cron_flag_overdue_stages(self):
        """form_overdue notifications for incomplete stages past their due date"""
        config = self.env["hr.appraisal.workflow.config"].get_config()
        if not config.overdue_alerts_enabled:
            return self.browse()
        today = fields.Date.today()
        flagged = self.browse()
        assignments = self.env["hr.appraisal.workflow.assignment"].search(
            [("state", "in", ["not_started", "in_progress"])]
        )
        for assignment in assignments:
            template = assignment.template_id
            try:
                created = self.browse()
                for stage in template.stage_ids.sorted("sequence"):
                    due_date = assignment.get_stage_due_date(stage)
                    if not due_date or due_date >= today or assignment.is_stage_completed(stage):
                        continue
                    for user in assignment.get_stage_participant_users(stage):
                        dedup_key = f"assignment-{assignment.id}-stage-{stage.id}-overdue-{user.id}"
                        if self.sudo().search_count([("dedup_key", "=", dedup_key)]):
                            continue
                        created |= self.sudo().create(dict(
                            self._channel_vals(template),
                            user_id=user.id,
                            category="form_overdue",
                            title=f"Overdue: {stage.name}",
                            message=f'"{stage.name}" of {template.name} for '
                                    f"{assignment.employee_id.name} was due on {_format_date(due_date)}.",
                            assignment_id=assignment.id,
                            employee_id=assignment.employee_id.id,
                            stage_id=stage.id,
                            form_id=stage.evaluation_form_id.id,
                            dedup_key=dedup_key,
                        ))
                if created and template.notification_enabled:
                    created.send()
                flagged |= created
            except Exception as e:
                _logger.error(f"Failed to flag overdue stages for review cycle {assignment.id}: {e}")
        if flagged:
            _logger.info(f"Flagged {len(flagged)} overdue appraisal stages")
        return flagged
