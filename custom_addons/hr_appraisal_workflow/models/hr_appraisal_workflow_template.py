# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import ValidationError
from datetime import timedelta
import logging

_logger = logging.getLogger(__name__)

INTERVAL_TYPES = [
    ("daily", "Daily"),
    ("weekly", "Weekly"),
    ("biweekly", "Bi-Weekly"),
    ("monthly", "Monthly"),
    ("quarterly", "Quarterly"),
    ("biannually", "Bi-Annually"),
    ("annually", "Annually"),
    ("custom", "Custom"),
]

INTERVAL_UNITS = [
    ("days", "Days"),
    ("weeks", "Weeks"),
    ("months", "Months"),
]

INTERVAL_DAYS = {
    "daily": 1,
    "weekly": 7,
    "biweekly": 14,
    "monthly": 30,
    "quarterly": 90,
    "biannually": 180,
    "annually": 365,
}


def interval_to_days(interval_type, value=0, unit=False, month_days=30, default=90):
    """Length in days of a recurring interval; ``default`` when it cannot be resolved"""
    if interval_type in INTERVAL_DAYS:
        return INTERVAL_DAYS[interval_type]
    if interval_type == "custom" and value and unit:
        return value * {"days": 1, "weeks": 7, "months": month_days}.get(unit, 0) or default
    return default


class HrAppraisalWorkflowTemplate(models.Model):
    _name = "hr.appraisal.workflow.template"
    _description = "Appraisal Workflow Template"
    _order = "name"

    name = fields.Char("Procedure Name", required=True)
    description = fields.Text("Description")
    job_ids = fields.Many2many(
        "hr.job",
        "hr_appraisal_workflow_template_job_rel",
        "template_id",
        "job_id",
        string="Applicable Positions",
        help="Leave empty to apply to every position",
    )
    department_ids = fields.Many2many(
        "hr.department",
        "hr_appraisal_workflow_template_department_rel",
        "template_id",
        "department_id",
        string="Applicable Departments",
        help="Leave empty to apply to every department",
    )
    stage_ids = fields.One2many(
        "hr.appraisal.workflow.stage", "template_id", string="Review Stages", copy=True
    )
    meeting_frequency_ids = fields.One2many(
        "hr.appraisal.meeting.frequency", "template_id", string="Meeting Frequencies", copy=True
    )
    interval_type = fields.Selection(
        INTERVAL_TYPES, string="Interval", required=True, default="quarterly",
        help="How often this procedure runs",
    )
    interval_value = fields.Integer("Every")
    interval_unit = fields.Selection(INTERVAL_UNITS, string="Unit")
    manager_levels = fields.Char(
        "Manager Levels", help="Comma separated manager levels used by this procedure, e.g. 1,2"
    )

    # Notification settings
    notification_enabled = fields.Boolean("Notifications Enabled", default=True)
    meeting_reminder_days = fields.Integer("Meeting Reminder (Days Before)", default=7)
    form_reminder_days = fields.Integer("Form Reminder (Days Before)", default=7)
    channel_email = fields.Boolean("Email", default=True)
    channel_inapp = fields.Boolean("In-App", default=True)
    channel_sms = fields.Boolean("SMS", default=False)

    active = fields.Boolean(default=True)
    stage_count = fields.Integer(compute="_compute_stage_count")
    assignment_ids = fields.One2many(
        "hr.appraisal.workflow.assignment", "template_id", string="Assignments"
    )
    assignment_count = fields.Integer(compute="_compute_assignment_count")

    @api.depends("stage_ids")
    def _compute_stage_count(self):
        for template in self:
            template.stage_count = len(template.stage_ids)

    @api.depends("assignment_ids")
    def _compute_assignment_count(self):
        for template in self:
            template.assignment_count = len(template.assignment_ids)

    @api.constrains("interval_type", "interval_value", "interval_unit")
    def _check_custom_interval(self):
        for template in self:
            if template.interval_type == "custom":
                if template.interval_value <= 0 or not template.interval_unit:
                    raise ValidationError("A custom interval needs a positive value and a unit.")

    @api.constrains("meeting_reminder_days", "form_reminder_days")
    def _check_reminder_days(self):
        for template in self:
            if template.meeting_reminder_days < 0 or template.form_reminder_days < 0:
                raise ValidationError("Reminder days cannot be negative.")

    @api.constrains("manager_levels")
    def _check_manager_levels(self):
        for template in self:
            try:
                template.get_manager_levels()
            except ValueError:
                raise ValidationError("Manager levels must be a comma separated list of numbers.")

    def get_manager_levels(self):
        self.ensure_one()
        return [int(level) for level in (self.manager_levels or "").split(",") if level.strip()]

    def copy_data(self, default=None):
        vals_list = super().copy_data(default=default)
        if default and "name" in default:
            return vals_list
        return [dict(vals, name=f"{template.name} (Copy)") for template, vals in zip(self, vals_list)]

    def copy(self, default=None):
        """Duplicate with the stage prerequisites pointing at the duplicated stages"""
        new_templates = super().copy(default=default)
        for template, new_template in zip(self, new_templates):
            stage_map = dict(zip(template.stage_ids, new_template.stage_ids))
            for stage, new_stage in stage_map.items():
                if stage.required_stage_ids:
                    new_stage.required_stage_ids = [
                        (6, 0, [stage_map[required].id for required in stage.required_stage_ids])
                    ]
        return new_templates

    def get_interval_days(self):
        """Length of one review cycle in days"""
        self.ensure_one()
        config = self.env["hr.appraisal.workflow.config"].get_config()
        return interval_to_days(
            self.interval_type,
            self.interval_value,
            self.interval_unit,
            month_days=config.month_days,
            default=config.default_interval_days,
        )

    def compute_end_date(self, start_date):
        """End of a cycle starting on ``start_date``: interval plus the furthest stage after it"""
        self.ensure_one()
        offsets = [stage.get_offset_days() for stage in self.stage_ids]
        max_offset_days = max([0] + offsets)
        return start_date + timedelta(days=self.get_interval_days() + max_offset_days)

    def is_applicable_to(self, employee):
        self.ensure_one()
        matches_position = not self.job_ids or employee.job_id in self.job_ids
        matches_department = not self.department_ids or employee.department_id in self.department_ids
        return matches_position or matches_department

    @api.model
    def get_available_templates(self, employee):
        """Active templates that apply to the employee's position or department"""
        return self.search([]).filtered(lambda t: t.is_applicable_to(employee))

    def action_view_assignments(self):
        self.ensure_one()
        return {
            "type": "ir.actions.act_window",
            "name": f"Assignments - {self.name}",
            "res_model": "hr.appraisal.workflow.assignment",
            "view_mode": "list,form",
            "domain": [("template_id", "=", self.id)],
            "context": {"default_template_id": self.id},
        }

    def action_open_assign_wizard(self):
        self.ensure_one()
        return {
            "type": "ir.actions.act_window",
            "name": "Assign Review Cycle",
            "res_model": "hr.appraisal.assign.wizard",
            "view_mode": "form",
            "target": "new",
            "context": {"default_template_id": self.id},
        }

    @api.model
    def create_default_templates(self):
        """Create the standard appraisal procedures"""
        Form = self.env["hr.appraisal.evaluation.form"]
        Form.create_default_forms()

        def form(name):
            return Form.with_context(active_test=False).search([("name", "=", name)], limit=1).id

        def stage(name, description, stage_type, attendees, due_type, offset, reminder_days,
                  form_name=None, level=0, required=True):
            return {
                "name": name,
                "description": description,
                "stage_type": stage_type,
                "evaluation_form_id": form(form_name) if form_name else False,
                "manager_level": level,
                "attendees": attendees,
                "due_date_type": due_type,
                "due_date_offset": offset,
                "required": required,
                "reminder_enabled": True,
                "reminder_days": reminder_days,
            }

        templates = [
            {
                "name": "Software Engineer Quarterly Appraisal",
                "description": "Standard quarterly performance review for software engineers. Includes "
                               "self-evaluation, manager review, and feedback meeting.",
                "interval_type": "quarterly",
                "manager_levels": "1,2",
                "meeting_reminder_days": 7,
                "form_reminder_days": 7,
                "stages": [
                    stage("Employee Self Evaluation",
                          "Employee fills out self-evaluation form covering achievements, challenges, and goals",
                          "evaluation", "employee", "before_interval", 1, 7, "Employee Self-Evaluation Form"),
                    stage("Manager Level 1 Review",
                          "Direct manager reviews employee's self-evaluation and provides initial feedback",
                          "review", "manager_level_1", "on_interval", 0, 3, "Manager Evaluation Form", level=1),
                    stage("Employee Meeting with Manager Level 1",
                          "One-on-one meeting between employee and direct manager to discuss performance",
                          "meeting", "employee,manager_level_1", "after_interval", 1, 7, level=1),
                    stage("Manager Level 1 Evaluation Form",
                          "Manager completes evaluation form after the meeting",
                          "evaluation", "manager_level_1", "after_interval", 1, 3, "Manager Evaluation Form", level=1),
                    stage("Manager Level 2 Final Review",
                          "Senior manager reviews and approves the appraisal",
                          "approval", "manager_level_2", "after_interval", 2, 3, level=2),
                ],
                # meeting waits for both the self evaluation and the manager review
                "prerequisites": {2: [0, 1]},
            },
            {
                "name": "Manager Annual Performance Review",
                "description": "Comprehensive annual performance review for managers. Includes 360-degree "
                               "feedback and multi-level approvals.",
                "interval_type": "annually",
                "manager_levels": "1,2",
                "meeting_reminder_days": 14,
                "form_reminder_days": 14,
                "stages": [
                    stage("Manager Self Assessment",
                          "Manager completes comprehensive self-assessment covering leadership, team management, "
                          "and strategic contributions",
                          "evaluation", "employee", "before_interval", 2, 14, "Employee Self-Evaluation Form"),
                    stage("Team Feedback Collection", "Collect feedback from direct reports and peers",
                          "evaluation", "employee", "before_interval", 1, 7, "Team Feedback Form"),
                    stage("Manager Level 1 Review", "Direct manager reviews all feedback and performance data",
                          "review", "manager_level_1", "on_interval", 0, 7, "Manager Evaluation Form", level=1),
                    stage("Performance Discussion Meeting",
                          "Comprehensive performance discussion meeting with direct manager",
                          "meeting", "employee,manager_level_1", "after_interval", 1, 7, level=1),
                    stage("Manager Level 2 Approval", "Senior manager approves the annual review",
                          "approval", "manager_level_2", "after_interval", 2, 7, level=2),
                ],
            },
            {
                "name": "Senior Executive Performance Review",
                "description": "Comprehensive bi-annual review for senior executives. Includes board-level "
                               "review and strategic performance assessment.",
                "interval_type": "biannually",
                "manager_levels": "1,2,3",
                "meeting_reminder_days": 14,
                "form_reminder_days": 10,
                "stages": [
                    stage("Executive Self Assessment",
                          "Executive completes comprehensive self-assessment covering strategic initiatives, "
                          "leadership, and business impact",
                          "evaluation", "employee", "before_interval", 2, 14, "Executive Self-Assessment"),
                    stage("Stakeholder Feedback Collection",
                          "Collect feedback from board members, peers, and key stakeholders",
                          "evaluation", "employee", "before_interval", 1, 10, "Stakeholder Feedback Form"),
                    stage("Manager Level 1 Initial Review", "CEO or direct supervisor conducts initial review",
                          "review", "manager_level_1", "on_interval", 0, 7, "Manager Evaluation Form", level=1),
                    stage("Executive Performance Meeting", "Comprehensive performance discussion meeting with CEO",
                          "meeting", "employee,manager_level_1", "after_interval", 1, 7, level=1),
                    stage("Manager Level 1 Evaluation", "CEO completes evaluation form",
                          "evaluation", "manager_level_1", "after_interval", 1, 5, "Manager Evaluation Form", level=1),
                    stage("Board Level Review", "Board of directors reviews and approves executive performance",
                          "approval", "manager_level_2", "after_interval", 2, 7, level=2),
                    stage("Final Approval", "Final approval from board chair or highest level manager",
                          "approval", "manager_level_3", "after_interval", 3, 5, level=3),
                ],
            },
            {
                "name": "1-on-1 Meeting Procedure",
                "description": "Regular one-on-one meetings between employees and their managers for ongoing "
                               "feedback, goal tracking, and career development discussions.",
                "interval_type": "biweekly",
                "manager_levels": "1",
                "meeting_reminder_days": 1,
                "form_reminder_days": 1,
                "stages": [
                    stage("Meeting Preparation", "Employee prepares agenda items and updates on current work",
                          "evaluation", "employee", "before_interval", 1, 1, "Employee Self-Evaluation Form",
                          required=False),
                    stage("1-on-1 Meeting", "Regular one-on-one meeting between employee and manager",
                          "meeting", "employee,manager_level_1", "on_interval", 0, 1, level=1),
                    stage("Meeting Notes & Action Items", "Manager documents meeting notes and action items",
                          "evaluation", "manager_level_1", "after_interval", 1, 1, "Meeting Notes Form", level=1,
                          required=False),
                ],
                "meetings": [
                    {"manager_level": 1, "frequency_type": "biweekly"},
                ],
            },
        ]

        created = self.browse()
        for data in templates:
            existing = self.with_context(active_test=False).search([("name", "=", data["name"])], limit=1)
            if existing:
                continue
            stages = data.pop("stages")
            prerequisites = data.pop("prerequisites", {})
            meetings = data.pop("meetings", [])
            data["stage_ids"] = [
                (0, 0, dict(vals, sequence=sequence)) for sequence, vals in enumerate(stages, start=1)
            ]
            data["meeting_frequency_ids"] = [(0, 0, vals) for vals in meetings]
            template = self.create(data)
            ordered = template.stage_ids.sorted("sequence")
            for index, required_indexes in prerequisites.items():
                ordered[index].required_stage_ids = [(6, 0, [ordered[i].id for i in required_indexes])]
            created |= template
        if created:
            _logger.info(f"Created {len(created)} default appraisal workflow templates")
        return created
