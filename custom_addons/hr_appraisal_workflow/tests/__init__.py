# -*- coding: utf-8 -*-
from . import test_workflow_template
from . import test_employee_managers
from . import test_workflow_assignment
from . import test_approval_review
from . import test_form_fill
from . import test_meeting_join
from . import test_notifications
