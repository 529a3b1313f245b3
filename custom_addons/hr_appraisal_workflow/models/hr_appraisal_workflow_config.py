from odoo import models, fields, api
from odoo.exceptions import ValidationError


class HrAppraisalWorkflowConfig(models.Model):
    _name = "hr.appraisal.workflow.config"
    _description = "Appraisal Workflow Configuration"
    _rec_name = "company_id"

    company_id = fields.Many2one(
        "res.company",
        string="Company",
        required=True,
        default=lambda self: self.env.company,
    )

    # Interval arithmetic
    default_interval_days = fields.Integer(
        "Default Interval (Days)",
        default=90,
        help="Review cycle length used when a template interval cannot be resolved",
    )
    month_days = fields.Integer(
        "Days per Month",
        default=30,
        help="Number of days counted for one month in interval and offset planning",
    )

    # Notification settings
    notification_grace_days = fields.Integer(
        "Notification Grace Period (Days)",
        default=1,
        help="How many days after its scheduled date a reminder may still be sent",
    )
    send_email_notifications = fields.Boolean("Send Email Notifications", default=True)
    send_inapp_notifications = fields.Boolean("Send In-App Notifications", default=True)
    overdue_alerts_enabled = fields.Boolean(
        "Raise Overdue Alerts",
        default=True,
        help="Create 'Form Overdue' notifications for stages past their due date",
    )

    # Demo data
    demo_stagger_months = fields.Integer(
        "Demo Stagger (Months)",
        default=1,
        help="Months between the start dates of multiple demo cycles of one employee",
    )

    _sql_constraints = [
        ("unique_company", "UNIQUE(company_id)", "Only one appraisal workflow configuration per company is allowed."),
    ]

    @api.constrains("default_interval_days", "notification_grace_days", "demo_stagger_months")
    def _check_positive_days(self):
        for record in self:
            if record.default_interval_days < 1:
                raise ValidationError("Default interval must be at least one day.")
            if record.notification_grace_days < 0:
                raise ValidationError("Notification grace period cannot be negative.")
            if record.demo_stagger_months < 0:
                raise ValidationError("Demo stagger cannot be negative.")

    @api.constrains("month_days")
    def _check_month_days(self):
        for record in self:
            if not 28 <= record.month_days <= 31:
                raise ValidationError("Days per month must be between 28 and 31.")

    @api.model
    def get_config(self, company_id=None):
        """Get configuration for a specific company or current company"""
        if not company_id:
            company_id = self.env.company.id

        config = self.sudo().search([("company_id", "=", company_id)], limit=1)
        if not config:
            config = self.sudo().create({"company_id": company_id})
        return config

    def _get_interval_unit_days(self, unit):
        """Days represented by one interval unit"""
        self.ensure_one()
        return {
            "days": 1,
            "weeks": 7,
            "months": self.month_days,
        }.get(unit, 0)

    @api.model
    def action_open_config(self):
        config = self.get_config()
        return {
            "type": "ir.actions.act_window",
            "name": "Appraisal Workflow Settings",
            "res_model": self._name,
            "res_id": config.id,
            "view_mode": "form",
            "target": "current",
        }
