# -*- coding: utf-8 -*-
from datetime import timedelta

from odoo.exceptions import UserError

from .common import AppraisalWorkflowCase


class TestMeetingJoin(AppraisalWorkflowCase):

    def setUp(self):
        super().setUp()
        self.assignment = self._create_assignment()
        self.meeting = self.assignment.action_schedule_meetings()

    def _open_wizard(self):
        return self.env['hr.appraisal.meeting.join.wizard'].with_context(
            default_assignment_id=self.assignment.id,
            default_stage_id=self.meeting_stage.id,
        ).create({})

    def test_scheduled_meeting(self):
        self.assertEqual(self.meeting.scheduled_date, self.today + timedelta(days=14))
        self.assertEqual(self.meeting.attendee_ids, self.alice | self.bob)
        self.assertEqual(self.meeting.manager_name, 'Bob Mugisha')
        self.assertEqual(self.meeting.employee_id, self.alice)

    def test_wizard_participants(self):
        wizard = self._open_wizard()
        self.assertEqual(wizard.manager_name, 'Bob Mugisha')
        self.assertEqual(wizard.attendee_names, 'Alice Uwase, Bob Mugisha')
        self.assertEqual(wizard.meeting_id, self.meeting)

    def test_join_and_toggles(self):
        wizard = self._open_wizard()
        action = wizard.action_join()
        self.assertTrue(wizard.in_meeting)
        self.assertEqual(action['params']['message'], 'Meeting started')
        self.assertEqual(action['params']['next']['res_id'], wizard.id)

        wizard.action_toggle_mute()
        wizard.action_toggle_video()
        self.assertTrue(wizard.is_muted)
        self.assertTrue(wizard.is_video_off)
        wizard.action_toggle_mute()
        self.assertFalse(wizard.is_muted)

        action = wizard.action_cancel()
        self.assertFalse(wizard.in_meeting)
        self.assertEqual(action['params']['message'], 'Meeting cancelled')
        self.assertFalse(self.assignment.is_stage_completed(self.meeting_stage))

    def test_end_requires_notes(self):
        wizard = self._open_wizard()
        wizard.action_join()
        with self.assertRaisesRegex(UserError, 'Please add meeting notes before ending the meeting'):
            wizard.action_end()
        self.assertEqual(self.meeting.state, 'scheduled')

    def test_end_meeting(self):
        wizard = self._open_wizard()
        wizard.action_join()
        wizard.notes = 'Agreed on a leadership course'
        action = wizard.action_end()
        self.assertEqual(action['params']['message'], 'Meeting completed successfully!')
        self.assertFalse(wizard.in_meeting)

        completion = self.assignment.get_completion(self.meeting_stage)
        self.assertEqual(completion.form_data['meetingNotes'], 'Agreed on a leadership course')
        self.assertIn('meetingEndedAt', completion.form_data)
        self.assertEqual(self.meeting.state, 'completed')
        self.assertEqual(self.meeting.notes, 'Agreed on a leadership course')
        self.assertEqual(self.meeting.actual_date, self.today)

        # reopening shows the saved notes
        self.assertEqual(self._open_wizard().notes, 'Agreed on a leadership course')

    def test_join_cancelled_cycle(self):
        self.assignment.action_cancel()
        with self.assertRaisesRegex(UserError, 'cancelled'):
            self._open_wizard().action_join()

    def test_meeting_state_rules(self):
        new_date = self.today + timedelta(days=21)
        self.meeting.action_reschedule(new_date)
        self.assertEqual(self.meeting.state, 'rescheduled')
        self.assertEqual(self.meeting.scheduled_date, new_date)

        self.meeting.action_complete('Short sync')
        with self.assertRaisesRegex(UserError, 'A completed meeting cannot be cancelled.'):
            self.meeting.action_cancel()
        with self.assertRaisesRegex(UserError, 'Only upcoming meetings can be rescheduled.'):
            self.meeting.action_reschedule(new_date)

        other = self.assignment.action_schedule_meetings()
        other.action_cancel()
        with self.assertRaisesRegex(UserError, 'A cancelled meeting cannot be completed.'):
            other.action_complete()

    def test_form_completed_after_submission(self):
        self.meeting.evaluation_form_id = self.form
        self.meeting.action_complete('Discussed')
        self.assignment.submit_stage_form(self.self_eval, self._valid_answers())
        self.assertTrue(self.meeting.form_completed)
        self.assertTrue(self.meeting.form_completed_date)
