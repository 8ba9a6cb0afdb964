from apscheduler.schedulers.background import BackgroundScheduler
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional
import enum
import logging

from app.core.errors import StoreError
from app.services.notifier import SubscriberOutcome, WeatherNotifier
from app.services.subscription_store import SubscriptionStore
from app.services.timing import minutes_until_next_slot

# Configuração de Logs
logger = logging.getLogger(__name__)

JOB_ID = "weather_updates"


def server_now() -> datetime:
    """Hora de parede do servidor (com fuso local)."""
    return datetime.now().astimezone()


class SchedulerState(str, enum.Enum):
    WAITING = "WAITING"   # armado para a primeira hora par
    RUNNING = "RUNNING"   # ciclo fixo de 2 em 2 horas


@dataclass
class CycleReport:
    checked: int = 0
    notified: int = 0
    failed: int = 0
    aborted: bool = False
    outcomes: List[SubscriberOutcome] = field(default_factory=list)


class WeatherUpdateScheduler:
    """
    Timer único do processo. O alinhamento inicial usa o relógio do servidor
    (não o fuso dos inscritos); cada inscrito resolve o próprio fuso no ciclo.
    """

    def __init__(
        self,
        notifier: WeatherNotifier,
        store: SubscriptionStore,
        clock: Callable[[], datetime] = server_now,
        interval_hours: int = 2,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self.notifier = notifier
        self.store = store
        self.clock = clock
        self.interval_hours = interval_hours
        self.scheduler = scheduler or BackgroundScheduler()
        self.state = SchedulerState.WAITING

    def first_run_time(self) -> datetime:
        now = self.clock()
        minutes = minutes_until_next_slot(now, self.interval_hours)
        if minutes == 0:
            return now
        return now.replace(second=0, microsecond=0) + timedelta(minutes=minutes)

    def start(self):
        if self.scheduler.running:
            return
        first_run = self.first_run_time()
        self.scheduler.add_job(
            self.run_cycle,
            'interval',
            hours=self.interval_hours,
            next_run_time=first_run,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60,
        )
        self.scheduler.start()
        logger.info(f"--- 🕒 Scheduler Iniciado ({self.interval_hours}h), primeira rodada às {first_run.isoformat()} ---")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def run_cycle(self) -> CycleReport:
        """Envia a atualização de tempo para todos os inscritos."""
        if self.state == SchedulerState.WAITING:
            self.state = SchedulerState.RUNNING

        report = CycleReport()
        try:
            subscriptions = self.store.list_all()
        except StoreError as e:
            logger.error(f"❌ Erro Scheduler (lendo inscrições): {e}")
            report.aborted = True
            return report

        logger.info(f"⏱️ [Scheduler] Enviando atualizações para {len(subscriptions)} inscrições...")

        for sub in subscriptions:
            report.checked += 1
            try:
                outcome = self.notifier.notify(sub)
            except Exception as e:
                # Isolamento: um inscrito com problema não derruba o ciclo
                logger.error(f"❌ Erro no inscrito {sub.location} (...{sub.endpoint[-16:]}): {e}")
                outcome = SubscriberOutcome(endpoint=sub.endpoint, error=e)

            report.outcomes.append(outcome)
            if outcome.ok:
                report.notified += 1
            else:
                report.failed += 1

        logger.info(f"✅ [Scheduler] Ciclo concluído: {report.notified} ok, {report.failed} com falha")
        return report


_weather_scheduler: Optional[WeatherUpdateScheduler] = None

def start_scheduler(weather_scheduler: WeatherUpdateScheduler):
    global _weather_scheduler
    _weather_scheduler = weather_scheduler
    weather_scheduler.start()

def stop_scheduler():
    if _weather_scheduler is not None:
        _weather_scheduler.shutdown()
