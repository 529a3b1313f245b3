# -*- coding: utf-8 -*-
from werkzeug.exceptions import NotFound

from odoo import http
from odoo.exceptions import AccessError, MissingError
from odoo.http import request, content_disposition


class AppraisalFormResponseController(http.Controller):

    @http.route(
        ["/hr_appraisal_workflow/form_response/<int:completion_id>/download"],
        type="http",
        auth="user",
    )
    def download_form_response(self, completion_id, **kw):
        """Download the answers of a completed stage as a JSON file"""
        completion = request.env["hr.appraisal.stage.completion"].browse(completion_id)
        try:
            completion.check_access("read")
            if not completion.exists() or not completion.completed:
                raise NotFound()
        except (AccessError, MissingError):
            raise NotFound()
        filename, content = completion.export_form_response()
        return request.make_response(
            content,
            headers=[
                ("Content-Type", "application/json"),
                ("Content-Length", len(content)),
                ("Content-Disposition", content_disposition(filename)),
            ],
        )
