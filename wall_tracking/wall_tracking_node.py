#!/usr/bin/env python3
"""
Wall tracking node.

Follows the left wall at a fixed standoff distance from laser scans, switches
between indoor and outdoor behaviour on GNSS fix quality, and reports when an
open place is reached. Tracking runs as the ``wall_tracking`` action.

Subscribes to:
    scan (LaserScan): Range scan
    gnss/fix (NavSatFix): Fix quality picks indoor/outdoor mode

Publishes:
    <cmd_vel_topic_name> (Twist): Velocity command, once per cycle
    open_place_arrived (Bool): Open-place flag, once per scan
    open_place_detection (String): Detection label, once per cycle
"""

import rclpy
from rclpy.node import Node
from rclpy.action import ActionServer, CancelResponse, GoalResponse
from rclpy.callback_groups import ReentrantCallbackGroup
from rclpy.executors import MultiThreadedExecutor
from rcl_interfaces.msg import ParameterDescriptor
from geometry_msgs.msg import Twist
from sensor_msgs.msg import LaserScan, NavSatFix
from std_msgs.msg import Bool, String
from wall_tracking_msgs.action import WallTracking

from .config import DEFAULT_PARAMETERS, WallTrackingConfig
from .control_task import ControlTask, TaskStatus
from .decision import DecisionEngine
from .mode import mode_from_covariance_type
from .pid import LateralPIDController
from .state import ControllerState


class WallTrackingNode(Node):
    """ROS 2 node hosting the wall tracking action server."""

    def __init__(self):
        super().__init__('wall_tracking_node')

        for name, default in DEFAULT_PARAMETERS.items():
            # Dynamic typing lets "kp: 1" load; from_parameters casts to the default's type
            self.declare_parameter(name, default, ParameterDescriptor(dynamic_typing=True))
        self.config = WallTrackingConfig.from_parameters(
            lambda name: self.get_parameter(name).value
        )
        self.get_logger().info(
            f'front wall check: {self.config.fwc_deg:.1f} deg, '
            f'front left check: {self.config.flw_deg:.1f} deg'
        )

        self.state = ControllerState(self.config.open_place_distance)
        self.engine = DecisionEngine(self.config, LateralPIDController.from_config(self.config))

        # Sensor callbacks must keep running while the action executes
        self.callback_group = ReentrantCallbackGroup()

        # Subscribers
        self.scan_sub = self.create_subscription(
            LaserScan,
            'scan',
            self.scan_callback,
            10,
            callback_group=self.callback_group
        )
        self.gnss_sub = self.create_subscription(
            NavSatFix,
            'gnss/fix',
            self.gnss_callback,
            10,
            callback_group=self.callback_group
        )

        # Publishers
        self.cmd_vel_pub = self.create_publisher(Twist, self.config.cmd_vel_topic_name, 10)
        self.open_place_arrived_pub = self.create_publisher(Bool, 'open_place_arrived', 10)
        self.open_place_detection_pub = self.create_publisher(String, 'open_place_detection', 10)

        # Action server
        self.action_server = ActionServer(
            self,
            WallTracking,
            'wall_tracking',
            execute_callback=self.execute_callback,
            goal_callback=self.goal_callback,
            cancel_callback=self.cancel_callback,
            callback_group=self.callback_group
        )

        self.get_logger().info('Wall tracking node started')

    # ========================================================================
    # CALLBACKS
    # ========================================================================

    def scan_callback(self, msg: LaserScan):
        first = not self.state.initialized
        try:
            arrived = self.state.update_scan(msg)
        except ValueError as e:
            self.get_logger().error(f'Dropping scan: {e}')
            return
        if first:
            self.get_logger().info('initialized scan data')
        self.publish_open_place_arrived(arrived)

    def gnss_callback(self, msg: NavSatFix):
        self.state.update_mode(mode_from_covariance_type(msg.position_covariance_type))

    def goal_callback(self, goal_request):
        # A running goal hands over control once the new one starts executing
        self.get_logger().info('Received goal request')
        return GoalResponse.ACCEPT

    def cancel_callback(self, goal_handle):
        self.get_logger().info('Received request to cancel goal')
        return CancelResponse.ACCEPT

    def execute_callback(self, goal_handle):
        feedback = WallTracking.Feedback()

        def publish_feedback(arrived: bool):
            feedback.open_place_arrived = arrived
            goal_handle.publish_feedback(feedback)

        task = ControlTask(self.engine, self.state, self, self.get_logger())
        outcome = task.run(
            lambda: goal_handle.is_cancel_requested,
            publish_feedback,
            rclpy.ok
        )

        result = WallTracking.Result()
        result.open_place_arrived = outcome.open_place_arrived
        if outcome.status is TaskStatus.CANCELED:
            goal_handle.canceled()
        elif outcome.status is TaskStatus.ABORTED:
            goal_handle.abort()
        else:
            goal_handle.succeed()
        return result

    # ========================================================================
    # PUBLISHERS
    # ========================================================================

    def publish_cmd_vel(self, linear: float, angular: float):
        cmd = Twist()
        cmd.linear.x = float(linear)
        cmd.angular.z = float(angular)
        self.cmd_vel_pub.publish(cmd)

    def publish_stop(self):
        self.publish_cmd_vel(0.0, 0.0)

    def publish_open_place_arrived(self, arrived: bool):
        msg = Bool()
        msg.data = bool(arrived)
        self.open_place_arrived_pub.publish(msg)

    def publish_open_place_detection(self, label: str):
        msg = String()
        msg.data = label
        self.open_place_detection_pub.publish(msg)


def main(args=None):
    rclpy.init(args=args)
    node = WallTrackingNode()
    executor = MultiThreadedExecutor()
    executor.add_node(node)

    try:
        executor.spin()
    except KeyboardInterrupt:
        pass
    finally:
        node.publish_stop()
        executor.shutdown()
        node.destroy_node()
        rclpy.shutdown()


if __name__ == '__main__':
    main()
