# -*- coding: utf-8 -*-
from datetime import timedelta

from .common import AppraisalWorkflowCase


class TestNotifications(AppraisalWorkflowCase):

    def setUp(self):
        super().setUp()
        self.Notification = self.env['hr.appraisal.notification']
        self.assignment = self._create_assignment()

    def _notify(self, **vals):
        return self.Notification.create(dict({
            'user_id': self.alice_user.id,
            'title': 'Reminder',
            'category': 'system',
        }, **vals))

    def test_feed_visibility(self):
        visible = self._notify(title='Today', scheduled_date=self.today)
        immediate = self._notify(title='Immediate')
        future = self._notify(title='Tomorrow', scheduled_date=self.today + timedelta(days=1))
        self._notify(title='For Bob', user_id=self.bob_user.id)

        feed = self.Notification.generate_for_user(self.alice_user)
        self.assertIn(visible, feed)
        self.assertIn(immediate, feed)
        self.assertNotIn(future, feed)
        self.assertEqual(set(feed.mapped('user_id').ids), {self.alice_user.id})

    def test_filters_and_counts(self):
        pending = self._notify(category='evaluation_pending')
        meeting = self._notify(category='meeting_scheduled')
        meeting.mark_as_read()

        feed = self.Notification.generate_for_user(self.alice_user)
        self.assertEqual(self.Notification.filter_notifications(feed, 'evaluation_pending'), pending)
        self.assertEqual(self.Notification.filter_notifications(feed, read_filter='unread') & (pending | meeting), pending)
        self.assertEqual(self.Notification.filter_notifications(feed, 'meeting_scheduled', 'unread'), self.Notification)

        counts = self.Notification.get_category_counts(self.alice_user)
        self.assertEqual(len(counts), 10)
        self.assertEqual(counts['evaluation_pending'], 1)
        self.assertEqual(counts['meeting_scheduled'], 0)
        self.assertEqual(counts['form_overdue'], 0)

        self.assertEqual(self.Notification.get_unread_count(self.alice_user), 1)
        self.Notification.mark_all_as_read(self.alice_user)
        self.assertEqual(self.Notification.get_unread_count(self.alice_user), 0)

    def test_reminders(self):
        reminders = self.Notification.generate_reminders_for_assignment(self.assignment)
        self.assertEqual(set(reminders.mapped('user_id').ids), {self.alice_user.id})

        due_soon = reminders.filtered(lambda n: n.category == 'evaluation_pending')
        # the self evaluation and the review are already due, so only later stages get an early reminder
        self.assertEqual(
            sorted(due_soon.mapped('title')),
            ['Evaluation Form Due Soon: Feedback Meeting', 'Evaluation Form Due Soon: Final Approval'],
        )
        approval_reminder = due_soon.filtered(lambda n: n.stage_id == self.approval)
        self.assertEqual(approval_reminder.scheduled_date, self.today + timedelta(days=7))

        form_due = reminders.filtered(lambda n: n.category == 'form_due')
        self.assertEqual(len(form_due), 4)
        self.assertEqual(
            form_due.filtered(lambda n: n.stage_id == self.self_eval).title, 'Evaluation Form Due: Self Evaluation'
        )

        meeting_reminder = reminders.filtered(lambda n: n.category == 'meeting_reminder')
        self.assertEqual(meeting_reminder.title, 'Evaluation Meeting Scheduled: Level 1 Manager')
        self.assertEqual(meeting_reminder.scheduled_date, self.today + timedelta(days=7))
        scheduled = reminders.filtered(lambda n: n.category == 'meeting_scheduled')
        self.assertEqual(scheduled.scheduled_date, self.today + timedelta(days=14))
        self.assertEqual(len(reminders), 8)

        # a second run creates nothing new
        again = self.Notification.generate_reminders_for_assignment(self.assignment)
        self.assertEqual(again, reminders)
        self.assertEqual(self.Notification.search_count([('assignment_id', '=', self.assignment.id)]), 8)

    def test_no_reminders(self):
        self.template.notification_enabled = False
        self.assertFalse(self.Notification.generate_reminders_for_assignment(self.assignment))

        self.template.notification_enabled = True
        newcomer = self.env['hr.employee'].create({'name': 'Eric Newcomer'})
        assignment = self._create_assignment(employee=newcomer)
        self.assertFalse(self.Notification.generate_reminders_for_assignment(assignment))

    def test_should_send(self):
        config = self.env['hr.appraisal.workflow.config'].get_config()
        config.notification_grace_days = 1

        self.assertTrue(self._notify(scheduled_date=self.today).should_send())
        self.assertTrue(self._notify().should_send())
        self.assertTrue(self._notify(scheduled_date=self.today - timedelta(days=1)).should_send())
        self.assertFalse(self._notify(scheduled_date=self.today - timedelta(days=2)).should_send())
        self.assertFalse(self._notify(scheduled_date=self.today + timedelta(days=1)).should_send())
        self.assertFalse(self._notify(scheduled_date=self.today, sent=True).should_send())

        config.notification_grace_days = 5
        self.assertTrue(self._notify(scheduled_date=self.today - timedelta(days=2)).should_send())

    def test_send(self):
        notification = self._notify(
            title='Evaluation Form Due: Self Evaluation',
            message='Please complete it',
            assignment_id=self.assignment.id,
            channel_sms=True,
        )
        notification.send()
        self.assertTrue(notification.sent)
        self.assertTrue(notification.sent_date)
        posted = self.assignment.message_ids.filtered(lambda m: m.subject == 'Evaluation Form Due: Self Evaluation')
        self.assertEqual(posted.partner_ids, self.alice_user.partner_id)

    def test_cron_send_scheduled(self):
        due = self._notify(scheduled_date=self.today)
        stale = self._notify(scheduled_date=self.today - timedelta(days=10))
        future = self._notify(scheduled_date=self.today + timedelta(days=3))

        self.Notification.cron_send_scheduled_notifications()
        self.assertTrue(due.sent)
        self.assertFalse(stale.sent)
        self.assertFalse(future.sent)

    def test_cron_flag_overdue(self):
        flagged = self.Notification.cron_flag_overdue_stages()
        overdue = flagged.filtered(lambda n: n.assignment_id == self.assignment)
        self.assertEqual(overdue.stage_id, self.self_eval)
        self.assertEqual(overdue.user_id, self.alice_user)
        self.assertEqual(overdue.category, 'form_overdue')
        self.assertEqual(overdue.title, 'Overdue: Self Evaluation')
        # alerts are delivered right away, not left for the scheduled sender
        self.assertTrue(overdue.sent)
        self.assertTrue(self.assignment.message_ids.filtered(lambda m: m.subject == 'Overdue: Self Evaluation'))

        self.assertFalse(
            self.Notification.cron_flag_overdue_stages().filtered(lambda n: n.assignment_id == self.assignment)
        )
        self.assertEqual(
            self.Notification.search_count([('assignment_id', '=', self.assignment.id), ('category', '=', 'form_overdue')]),
            1,
        )

        self.assignment.submit_stage_form(self.self_eval, self._valid_answers())
        other = self._create_assignment(employee=self.bob)
        self.env['hr.appraisal.workflow.config'].get_config().overdue_alerts_enabled = False
        self.assertFalse(self.Notification.cron_flag_overdue_stages())
        self.assertFalse(self.Notification.search([('assignment_id', '=', other.id), ('category', '=', 'form_overdue')]))

    def test_action_open(self):
        notification = self._notify(assignment_id=self.assignment.id, stage_id=self.self_eval.id)
        action = notification.action_open()
        self.assertTrue(notification.is_read)
        self.assertEqual(action['res_model'], 'hr.appraisal.form.fill.wizard')

        notification = self._notify(assignment_id=self.assignment.id)
        action = notification.action_open()
        self.assertEqual(action['res_id'], self.assignment.id)

    def test_cron_flag_overdue_without_notifications(self):
        self.template.notification_enabled = False
        overdue = self.Notification.cron_flag_overdue_stages().filtered(lambda n: n.assignment_id == self.assignment)
        self.assertEqual(overdue.stage_id, self.self_eval)
        self.assertFalse(overdue.sent)

    def test_stage_reminder_settings(self):
        self.approval.reminder_days = 3
        self.meeting_stage.reminder_enabled = False
        reminders = self.Notification.generate_reminders_for_assignment(self.assignment)

        due_soon = reminders.filtered(lambda n: n.category == 'evaluation_pending')
        self.assertEqual(due_soon.stage_id, self.approval)
        # due two weeks after the start date, reminded three days before
        self.assertEqual(due_soon.scheduled_date, self.today + timedelta(days=11))
        # the due date notice is kept for stages without early reminders
        self.assertIn(self.meeting_stage, reminders.filtered(lambda n: n.category == 'form_due').stage_id)

    def test_meeting_reminder_marks_meeting(self):
        meeting = self.assignment.action_schedule_meetings()
        reminders = self.Notification.generate_reminders_for_assignment(self.assignment)
        meeting_reminder = reminders.filtered(lambda n: n.category == 'meeting_reminder')
        self.assertEqual(meeting_reminder.meeting_id, meeting)
        self.assertEqual(reminders.filtered(lambda n: n.category == 'meeting_scheduled').meeting_id, meeting)
        self.assertFalse(meeting.meeting_reminder_sent)

        meeting_reminder.send()
        self.assertTrue(meeting.meeting_reminder_sent)
